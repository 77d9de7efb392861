"""
Development Server Entry Point
==============================

Usage:
    python run.py                          # Development mode with reload
    python run.py --no-reload              # Without auto-reload
    python run.py --host 0.0.0.0 --port 9000
"""

import argparse
import os
import sys

# Make the package importable in the uvicorn reloader subprocess
project_dir = os.path.dirname(os.path.abspath(__file__))
current_pythonpath = os.environ.get("PYTHONPATH", "")
if project_dir not in current_pythonpath.split(os.pathsep):
    os.environ["PYTHONPATH"] = os.pathsep.join(filter(None, [project_dir, current_pythonpath]))
if project_dir not in sys.path:
    sys.path.insert(0, project_dir)


def main():
    """Run the development server."""
    import uvicorn
    from reportflow.core.config import settings

    parser = argparse.ArgumentParser(description="Run the ReportFlow development server")
    parser.add_argument(
        "--no-reload",
        action="store_true",
        help="Disable auto-reload",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)",
    )
    args = parser.parse_args()

    print(f"\n{'=' * 50}")
    print(f"  {settings.APP_NAME} v{settings.APP_VERSION}")
    print(f"  Environment: {settings.ENVIRONMENT}")
    print(f"  Database: {settings.DATABASE_PROVIDER}")
    print(f"{'=' * 50}\n")

    print(f"Server: http://{args.host}:{args.port}")
    print("Press CTRL+C to stop\n")

    uvicorn.run(
        "reportflow.main:app",
        host=args.host,
        port=args.port,
        reload=not args.no_reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
