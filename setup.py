"""Custom setup.py that writes cmdsvc/_build_info.py during builds.

pyproject.toml carries the project metadata; this script only hooks
build_py so the built package records the git commit it came from.
``cmdsvc --version`` prints that commit when the file is present.
"""

import subprocess
import sys
from datetime import UTC, datetime
from pathlib import Path

from setuptools import setup
from setuptools.command.build_py import build_py

_PACKAGE = "cmdsvc"

_BUILD_INFO_TEMPLATE = '''\
"""Build information - auto-generated during install, do not edit."""

COMMIT_HASH = "{commit}"
COMMIT_SHORT = "{short}"
BUILD_TIME = "{built}"
MODIFIED = {modified}
'''


def _git(*args: str) -> str | None:
    """Run git in the source tree and return its stdout, None on failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            timeout=5,
            cwd=Path(__file__).parent,
        )
    except (subprocess.SubprocessError, OSError):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip()


def _write_build_info(package_dir: Path) -> None:
    commit = _git("rev-parse", "HEAD")
    if not commit:
        print(f"{_PACKAGE}: not a git checkout, no build info", file=sys.stderr)
        return

    content = _BUILD_INFO_TEMPLATE.format(
        commit=commit,
        short=commit[:7],
        built=datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
        modified=bool(_git("status", "--porcelain")),
    )
    (package_dir / "_build_info.py").write_text(content)
    print(f"{_PACKAGE}: build info for {commit[:7]}", file=sys.stderr)


class BuildPyWithBuildInfo(build_py):
    """build_py that adds _build_info.py to the build directory only."""

    def run(self):
        super().run()
        package_dir = Path(self.build_lib) / _PACKAGE
        if package_dir.is_dir():
            _write_build_info(package_dir)


setup(cmdclass={"build_py": BuildPyWithBuildInfo})
