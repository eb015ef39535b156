"""
Simple development server for the registration form.
Serves frontend/ as static files; the form talks to the API started by main.py.
"""

import http.server
import os
import socketserver
from pathlib import Path

PORT = int(os.environ.get("FRONTEND_PORT", "8080"))
DIRECTORY = Path(__file__).parent / "frontend"


class Handler(http.server.SimpleHTTPRequestHandler):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, directory=str(DIRECTORY), **kwargs)

    def end_headers(self):
        # Enable CORS for development
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("X-Content-Type-Options", "nosniff")
        super().end_headers()


if __name__ == "__main__":
    with socketserver.TCPServer(("", PORT), Handler) as httpd:
        print(f"Serving registration form at http://localhost:{PORT}/index.html")
        print("API expected at http://localhost:3000 (python main.py)")
        print("Press Ctrl+C to stop")
        try:
            httpd.serve_forever()
        except KeyboardInterrupt:
            print("\nShutting down...")
