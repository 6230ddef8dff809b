import platform
import sys
import tempfile
from importlib import metadata

from pathlib import Path


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from weightbalance.config import LOGS_DIR, OUTPUTS_DIR
from weightbalance.utils.logging import write_json


REQUIRED_PACKAGES = ["pandas", "numpy", "matplotlib", "openpyxl"]


def _is_writable(path: Path) -> bool:
    try:
        path.mkdir(parents=True, exist_ok=True)
        with tempfile.TemporaryFile(dir=path):
            pass
    except OSError:
        return False
    return True


def main() -> None:
    versions = {}
    for pkg in REQUIRED_PACKAGES:
        try:
            versions[pkg] = metadata.version(pkg)
        except metadata.PackageNotFoundError:
            versions[pkg] = None

    info = {
        "python_version": sys.version,
        "platform": platform.platform(),
        "packages": versions,
        "missing_packages": [pkg for pkg, v in versions.items() if v is None],
        "outputs_dir": str(OUTPUTS_DIR),
        "outputs_dir_writable": _is_writable(OUTPUTS_DIR),
    }
    write_json(LOGS_DIR / "environment_check.json", info)
    print("Wrote outputs/logs/environment_check.json")


if __name__ == "__main__":
    main()
