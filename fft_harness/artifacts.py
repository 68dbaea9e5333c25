"""
Build invocation and artifact resolution for candidate implementations.

Each candidate is described by an ``ArtifactSpec``: how to build it, where its
build tool leaves the output, how to recognise the artifact among the entries
there, and the fixed name it is copied to in the flat ``bins/`` directory.
All failures are setup-time and fatal.
"""
from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional

from .exceptions import (
    AmbiguousArtifactError,
    ArtifactNotFoundError,
    BuildError,
    DatasetIOError,
)

logger = logging.getLogger(__name__)


class ArtifactSpec:
    """
    Descriptor of one candidate implementation.

    Parameters
    ----------
    name : str
        Human-readable candidate name used in every diagnostic
    search_dir : str or Path
        Build-output directory, relative to the run root
    artifact_name : str
        Name of the copy placed in the artifacts directory
    command : list of str
        Command template; the token ``"{artifact}"`` is replaced by the copied artifact path
    build_command : list of str, optional
        External build command; None means there is nothing to build
    build_cwd : str or Path, optional
        Working directory of the build, relative to the run root
    exact : str, optional
        Match an entry with exactly this name
    prefix, suffix : str, optional
        Match entries whose name starts with ``prefix`` and ends with ``suffix``
    reads_stdin : bool
        Feed ``inputs/{size}.dat`` to the candidate's standard input
    """

    def __init__(
        self,
        name: str,
        search_dir,
        artifact_name: str,
        command: List[str],
        build_command: Optional[List[str]] = None,
        build_cwd=None,
        exact: Optional[str] = None,
        prefix: Optional[str] = None,
        suffix: Optional[str] = None,
        reads_stdin: bool = False,
    ):
        if exact is None and prefix is None and suffix is None:
            raise ValueError(f"{name}: one of exact, prefix or suffix is required")
        if exact is not None and (prefix is not None or suffix is not None):
            raise ValueError(f"{name}: exact cannot be combined with prefix/suffix")
        self.name = name
        self.search_dir = Path(search_dir)
        self.artifact_name = artifact_name
        self.command = tuple(command)
        self.build_command = tuple(build_command) if build_command else None
        self.build_cwd = Path(build_cwd) if build_cwd is not None else None
        self.exact = exact
        self.prefix = prefix
        self.suffix = suffix
        self.reads_stdin = reads_stdin

    def matches(self, entry_name: str) -> bool:
        if self.exact is not None:
            return entry_name == self.exact
        return entry_name.startswith(self.prefix or "") and entry_name.endswith(self.suffix or "")

    @property
    def pattern(self) -> str:
        if self.exact is not None:
            return repr(self.exact)
        return f"{self.prefix or ''}*{self.suffix or ''}"

    def command_for(self, artifact: Path) -> List[str]:
        return [str(artifact) if token == "{artifact}" else token for token in self.command]

    def __repr__(self):
        return f"ArtifactSpec(name={self.name!r}, search_dir='{self.search_dir}', pattern={self.pattern})"


def run_build(spec: ArtifactSpec, root: Path) -> None:
    """
    Run the candidate's build command in its project directory.

    The build inherits the terminal so its progress stays visible.

    Raises
    ------
    BuildError
        If the command exits non-zero or cannot be started
    """
    if spec.build_command is None:
        logger.debug("%s has no build step", spec.name)
        return

    cwd = root / spec.build_cwd if spec.build_cwd is not None else root
    logger.info("compiling the %s FFT demo...", spec.name)
    logger.debug("running %s in %s", " ".join(spec.build_command), cwd)
    try:
        proc = subprocess.run(list(spec.build_command), cwd=str(cwd), check=False)
    except OSError as exc:
        logger.error("could not start the %s build: %s", spec.name, exc)
        raise BuildError(spec.name, spec.build_command, cwd, -1) from exc

    if proc.returncode != 0:
        logger.error("building %s exited with status %d", spec.name, proc.returncode)
        raise BuildError(spec.name, spec.build_command, cwd, proc.returncode)


def find_artifact(spec: ArtifactSpec, root: Path) -> Path:
    """
    Locate the single build-output entry matching ``spec``.

    Only the immediate entries of the search directory are considered.

    Raises
    ------
    ArtifactNotFoundError
        If the directory is missing or nothing matches
    AmbiguousArtifactError
        If more than one entry matches
    """
    search_dir = root / spec.search_dir
    if not search_dir.is_dir():
        raise ArtifactNotFoundError(spec.name, search_dir, spec.pattern)

    matches = sorted(entry for entry in search_dir.iterdir() if spec.matches(entry.name))
    if not matches:
        raise ArtifactNotFoundError(spec.name, search_dir, spec.pattern)
    if len(matches) > 1:
        raise AmbiguousArtifactError(spec.name, search_dir, spec.pattern, matches)
    return matches[0]


def resolve_artifact(spec: ArtifactSpec, root: Path, bins_dir: Path) -> Path:
    """
    Build the candidate, locate its artifact and copy it into ``bins_dir``.

    Returns
    -------
    Path
        ``bins_dir / spec.artifact_name``
    """
    run_build(spec, root)
    source = find_artifact(spec, root)

    target = bins_dir / spec.artifact_name
    logger.info("copying the artifact to `%s`...", target)
    try:
        bins_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
    except OSError as exc:
        raise DatasetIOError("copy artifact to", target, exc) from exc
    return target


def resolve_all(specs: List[ArtifactSpec], root: Path, bins_dir: Path) -> dict:
    """Resolve every candidate in order; the first failure aborts the whole run."""
    return {spec.name: resolve_artifact(spec, root, bins_dir) for spec in specs}
