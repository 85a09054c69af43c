"""
Run the API locally with auto-reload.

Usage:
    python dev_server.py
"""

import uvicorn

if __name__ == "__main__":
    print("=" * 60)
    print("Starting Agency Command Centre API")
    print("=" * 60)
    print()
    print("API Endpoints:")
    print("   - Health Check:  GET  http://localhost:8000/health")
    print("   - Current user:  GET  http://localhost:8000/auth/me")
    print("   - API Docs:           http://localhost:8000/docs")
    print()
    print("Authentication:")
    print("   All endpoints except /health, /auth/login, /auth/first-time-setup")
    print("   and /auth/password-reset require:")
    print("   Authorization: Bearer <supabase access token>")
    print()
    print("=" * 60)

    uvicorn.run(
        "command_centre.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
