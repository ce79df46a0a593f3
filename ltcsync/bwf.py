"""
Broadcast WAV side of the sync: which recordings share a take, and writing
TimeReference/OriginationTime/OriginationDate with bwfmetaedit.

Recorders name multitrack takes like "250913_0009_1-2.wav",
"250913_0009_3.wav", "250913_0009_MIX.wav": date, take number, then the
track pattern. Files sharing the first two parts are siblings.
"""

import logging
import subprocess
from pathlib import Path
from typing import Dict, List, Union

from .metadata import Metadata

_logger = logging.getLogger(__name__)

WAV_SUFFIX = ".wav"


def _name_parts(path: Path) -> List[str]:
    return path.stem.split("_")


def is_sibling(source: Union[str, Path], candidate: Union[str, Path]) -> bool:
    """True if both names have 3+ '_' parts and share the first two."""
    source_parts = _name_parts(Path(source))
    candidate_parts = _name_parts(Path(candidate))

    if len(source_parts) < 3 or len(candidate_parts) < 3:
        return False

    return source_parts[:2] == candidate_parts[:2]


def find_sibling_files(source: Union[str, Path]) -> List[Path]:
    """WAV files next to source (excluding it) belonging to the same take."""
    source = Path(source).resolve()
    siblings = sorted(
        path for path in source.parent.iterdir()
        if path.is_file()
        and path.suffix.lower() == WAV_SUFFIX
        and path.name != source.name
        and is_sibling(source, path)
    )
    _logger.info(f"Found {len(siblings)} sibling files: {[p.name for p in siblings]}")
    return siblings


def files_by_pattern(directory: Union[str, Path]) -> Dict[str, List[Path]]:
    """
    Group a directory's WAV files by track pattern (last '_' part).

    Files with fewer than three name parts are ignored.
    """
    groups: Dict[str, List[Path]] = {}
    for path in sorted(Path(directory).iterdir()):
        if not path.is_file() or path.suffix.lower() != WAV_SUFFIX:
            continue
        parts = _name_parts(path)
        if len(parts) < 3:
            continue
        groups.setdefault(parts[-1], []).append(path)
    return dict(sorted(groups.items()))


def bwfmetaedit_command(
    path: Union[str, Path],
    metadata: Metadata,
    executable: str = "bwfmetaedit",
) -> List[str]:
    """Argument vector for writing metadata into one file."""
    return [
        executable,
        f"--Timereference={metadata.time_reference}",
        f"--OriginationTime={metadata.origination_time}",
        f"--OriginationDate={metadata.origination_date}",
        str(path),
    ]


def write_metadata(
    path: Union[str, Path],
    metadata: Metadata,
    dry_run: bool = False,
    executable: str = "bwfmetaedit",
) -> List[str]:
    """
    Write metadata into a BWF file with bwfmetaedit.

    Returns:
        The command that was (or, for a dry run, would have been) run

    Raises:
        FileNotFoundError: if bwfmetaedit is not installed
        subprocess.CalledProcessError: if bwfmetaedit fails
    """
    command = bwfmetaedit_command(path, metadata, executable)
    _logger.info(f"Updating metadata for: {Path(path).name}")
    _logger.debug(f"Running: {' '.join(command)}")

    if not dry_run:
        subprocess.run(command, check=True, capture_output=True)

    return command
