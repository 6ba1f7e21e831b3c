"""
Versioning for shaderblocks. We use a hard-coded version number, because it's
simple and always works. And for dev installs we add extra versioning info.
"""

import logging
import subprocess
from pathlib import Path


# This is the reference version number, to be bumped before each release.
__version__ = "0.1.0"
version_info = tuple(map(int, __version__.split(".")))


logger = logging.getLogger("shaderblocks")

# Get whether this is a repo. If so, repo_dir is the path, otherwise repo_dir is None.
repo_dir = Path(__file__).parents[1]
repo_dir = repo_dir if repo_dir.joinpath(".git").is_dir() else None


def get_version():
    """Get the version string."""
    if repo_dir:
        return get_extended_version()
    else:
        return __version__


def get_extended_version():
    """Get an extended version string with the git hash (and dirty flag)."""
    command = ["git", "describe", "--long", "--always", "--dirty"]
    try:
        p = subprocess.run(command, cwd=repo_dir, capture_output=True)
    except OSError as err:
        logger.warning(f"Could not get shaderblocks version: {err}")
        return __version__
    if p.returncode:
        logger.warning(
            "Could not get shaderblocks version: "
            + p.stderr.decode(errors="ignore")
        )
        return __version__
    label = p.stdout.decode(errors="ignore").strip().split("-")[-1]
    return f"{__version__}+{label}"


__version__ = get_version()
