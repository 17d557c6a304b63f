#!/usr/bin/env python3
"""
Development startup script for the Test Manager API
"""

import shutil
import sys
from pathlib import Path


def main():
    """Main startup function"""
    print("🚀 Starting Test Manager API...")

    env_file = Path(".env")
    if not env_file.exists():
        if Path(".env.example").exists():
            shutil.copy(".env.example", ".env")
            print("✅ .env file created from .env.example")
        else:
            print("⚠️  No .env file, running with default settings")

    from app.config.settings import settings

    Path("data").mkdir(exist_ok=True)

    base_url = f"http://localhost:{settings.api_port}{settings.api_prefix}"
    print(f"📚 API Documentation: {base_url}/docs")
    print(f"🏥 Health Check: {base_url}/health")
    if not settings.secret_key:
        print("🔓 SECRET_KEY is not set, requests are not authenticated")
    print("🔄 Use Ctrl+C to stop the server")

    try:
        import uvicorn
        uvicorn.run(
            "main:app",
            host=settings.api_host,
            port=settings.api_port,
            reload=True,
            log_level=settings.log_level.lower()
        )
    except KeyboardInterrupt:
        print("\n👋 Server stopped by user")
    except Exception as e:
        print(f"❌ Error starting server: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
