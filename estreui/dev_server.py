"""
HTTPS development server for EstreUI projects.

Service workers only register over a secure origin, so the server always runs
with TLS. Certificates are looked up in the project directory first and
generated with mkcert or openssl when none exist.
"""

import atexit
import platform
import shutil
import socket
import subprocess
import threading
import webbrowser
from pathlib import Path

from flask import Flask, send_from_directory
from loguru import logger
from pydantic import BaseModel

from estreui.errors import DevServerError
from estreui.utils.path_constants import INDEX_FILE

MIME_TYPES = {
    ".html": "text/html",
    ".js": "text/javascript",
    ".css": "text/css",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".wav": "audio/wav",
    ".mp3": "audio/mpeg",
    ".woff": "application/font-woff",
    ".ttf": "application/font-ttf",
    ".eot": "application/vnd.ms-fontobject",
    ".otf": "application/font-otf",
    ".wasm": "application/wasm",
}
DEFAULT_MIME_TYPE = "application/octet-stream"

# Existing certificate pairs, in order of preference
CERTIFICATE_FILES = [
    ("localhost.pem", "localhost-key.pem"),
    ("localhost+2.pem", "localhost+2-key.pem"),
    ("server.cert", "server.key"),
]


class CertificatePair(BaseModel):
    cert_path: Path
    key_path: Path
    trusted: bool = False
    temporary: bool = False

    def remove(self) -> None:
        """Delete the certificate files; used for temporary pairs."""
        for path in (self.cert_path, self.key_path):
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not delete {path.name}: {e}")


def mime_type_for(file_name: str) -> str:
    return MIME_TYPES.get(Path(file_name).suffix.lower(), DEFAULT_MIME_TYPE)


def create_app(project_root: Path) -> Flask:
    """Flask app serving the project directory as static files."""
    root = Path(project_root).resolve()
    app = Flask(__name__, static_folder=None)

    @app.route("/")
    def index():
        return send_from_directory(root, INDEX_FILE, mimetype=mime_type_for(INDEX_FILE))

    @app.route("/<path:filename>")
    def project_file(filename: str):
        return send_from_directory(root, filename, mimetype=mime_type_for(filename))

    @app.after_request
    def allow_service_worker_scope(response):
        response.headers["Service-Worker-Allowed"] = "/"
        return response

    return app


def find_certificates(project_root: Path) -> CertificatePair | None:
    """Return the first existing certificate pair in the project directory."""
    for cert_name, key_name in CERTIFICATE_FILES:
        cert_path = project_root / cert_name
        key_path = project_root / key_name
        if cert_path.is_file() and key_path.is_file():
            return CertificatePair(cert_path=cert_path, key_path=key_path, trusted=cert_name != "server.cert")
    return None


def mkcert_install_hints(system: str | None = None) -> list[str]:
    """Platform-specific instructions for installing mkcert."""
    system = system or platform.system()
    if system == "Darwin":
        return ["brew install mkcert", "mkcert -install"]
    if system == "Windows":
        return [
            "choco install mkcert",
            "# or download from: https://github.com/FiloSottile/mkcert/releases",
            "mkcert -install",
        ]
    return [
        "sudo pacman -S mkcert",
        "sudo apt install mkcert",
        "# or download from: https://github.com/FiloSottile/mkcert/releases",
        "mkcert -install",
    ]


def _run_tool(command: list[str], cwd: Path) -> bool:
    logger.debug(f"Running: {' '.join(command)}")
    try:
        subprocess.run(command, cwd=cwd, stdout=subprocess.PIPE, stderr=subprocess.PIPE, text=True, check=True)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning(f"{command[0]} failed: {e}")
        return False
    return True


def generate_certificates(project_root: Path) -> CertificatePair:
    """Create a certificate pair with mkcert, or a temporary one with openssl.

    Raises:
        DevServerError: If neither tool can produce certificates
    """
    if shutil.which("mkcert"):
        logger.info("mkcert found, generating trusted certificates...")
        if _run_tool(["mkcert", "localhost", "127.0.0.1", "::1"], project_root):
            pair = find_certificates(project_root)
            if pair is not None:
                return pair
    else:
        logger.warning("mkcert not found. For a trusted certificate without browser warnings, install mkcert:")
        for hint in mkcert_install_hints():
            logger.warning(f"  {hint}")

    if shutil.which("openssl"):
        logger.info("Generating temporary self-signed certificate with openssl...")
        command = [
            "openssl", "req", "-nodes", "-new", "-x509",
            "-keyout", "server.key", "-out", "server.cert",
            "-days", "365", "-subj", "/CN=localhost",
        ]
        if _run_tool(command, project_root):
            return CertificatePair(
                cert_path=project_root / "server.cert",
                key_path=project_root / "server.key",
                temporary=True,
            )

    raise DevServerError(
        "Failed to create an SSL certificate.",
        hints=["Install mkcert or openssl, or provide server.key and server.cert manually."],
    )


def port_in_use(port: int, host: str = "localhost") -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return True
    return False


def port_in_use_hints(port: int, system: str | None = None) -> list[str]:
    system = system or platform.system()
    hints = [f"Stop the process using port {port}:"]
    if system == "Windows":
        hints += [f"  netstat -ano | findstr :{port}", "  taskkill /PID <PID> /F"]
    else:
        hints.append(f"  lsof -ti:{port} | xargs kill -9")
    hints += ["Or use a different port:", "  estreui dev -p 3000"]
    return hints


def run_dev_server(project_root: Path, port: int, open_browser: bool = True) -> None:
    """Serve the project over HTTPS until interrupted.

    Raises:
        DevServerError: If the port is taken or no certificate is available
    """
    project_root = Path(project_root).resolve()
    if port_in_use(port):
        raise DevServerError(f"Port {port} is already in use.", hints=port_in_use_hints(port))

    certificates = find_certificates(project_root)
    if certificates is None:
        logger.info("No certificates found.")
        certificates = generate_certificates(project_root)
    elif certificates.trusted:
        logger.info("Using mkcert certificates (trusted)")
    else:
        logger.info("Using existing self-signed certificates")

    if certificates.temporary:
        logger.warning("Self-signed certificate: the browser will show a security warning.")
        atexit.register(certificates.remove)

    url = f"https://localhost:{port}/"
    logger.info(f"Server running at {url}")
    if open_browser:
        threading.Timer(1.0, webbrowser.open, args=(url,)).start()

    app = create_app(project_root)
    try:
        app.run(
            host="localhost",
            port=port,
            ssl_context=(str(certificates.cert_path), str(certificates.key_path)),
            use_reloader=False,
        )
    except OSError as e:
        raise DevServerError(f"Server error: {e}", hints=port_in_use_hints(port)) from e
