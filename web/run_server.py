"""
웹 서버 실행 스크립트
백엔드 API 서버를 시작합니다.
"""

import uvicorn


def main():
    print("=" * 60)
    print("  MLFQ 스케줄러 시뮬레이터 - 웹 서버")
    print("=" * 60)
    print()
    print("API 문서: http://localhost:8000/docs")
    print("종료하려면 Ctrl+C를 누르세요.")
    print("-" * 60)

    uvicorn.run("web.backend.app:app", host="0.0.0.0", port=8000, reload=True)


if __name__ == "__main__":
    main()
