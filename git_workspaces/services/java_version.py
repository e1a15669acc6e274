"""Derive a `.java-version` file from Maven build files."""

import re
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from git_workspaces.logging_config import get_logger

logger = get_logger(__name__)

JAVA_VERSION_FILE = ".java-version"
VALID_VERSION = re.compile(r"^[0-9]+(\.[0-9]+)*$")

# Tried in order; the first match wins
PROPERTY_PATTERNS = [
    re.compile(r"<java\.version>\s*([^<]*?)\s*</java\.version>"),
    re.compile(r"<maven\.compiler\.source>\s*([^<]*?)\s*</maven\.compiler\.source>"),
    re.compile(r"<maven\.compiler\.target>\s*([^<]*?)\s*</maven\.compiler\.target>"),
]
COMPILER_PLUGIN = re.compile(
    r"<plugin>(?:(?!</plugin>).)*?<groupId>\s*org\.apache\.maven\.plugins\s*</groupId>\s*"
    r"<artifactId>\s*maven-compiler-plugin\s*</artifactId>(?:(?!</plugin>).)*?"
    r"<source>\s*([^<]*?)\s*</source>",
    re.DOTALL,
)
PROPERTIES_BLOCK = re.compile(r"<properties>(.*?)</properties>", re.DOTALL)
NUMERIC_VERSION_PROPERTY = re.compile(r"<([\w.\-]*version)>\s*([0-9]+)\s*</\1>")


class VersionFileOutcome(Enum):
    WRITTEN = "written"
    SKIPPED = "skipped"


def extract_java_version(pom_content: str) -> Optional[str]:
    """Extract the Java version declared in a pom.xml, or None."""
    for pattern in PROPERTY_PATTERNS:
        match = pattern.search(pom_content)
        if match and match.group(1):
            return match.group(1)

    match = COMPILER_PLUGIN.search(pom_content)
    if match and match.group(1):
        return match.group(1)

    for block in PROPERTIES_BLOCK.findall(pom_content):
        match = NUMERIC_VERSION_PROPERTY.search(block)
        if match:
            return match.group(2)

    return None


def _read_version(pom_file: Path) -> Optional[str]:
    try:
        return extract_java_version(pom_file.read_text(errors="ignore"))
    except OSError as e:
        logger.debug(f"Could not read {pom_file}: {e}")
        return None


def derive_version_file(project_path: Union[str, Path]) -> VersionFileOutcome:
    """Write `.java-version` for a Maven project when it can be derived.

    The root pom.xml is tried first, then `*/pom.xml` of submodules.
    An existing `.java-version` is never overwritten.
    """
    project_path = Path(project_path)
    version_file = project_path / JAVA_VERSION_FILE
    root_pom = project_path / "pom.xml"

    if version_file.exists() or not root_pom.is_file():
        return VersionFileOutcome.SKIPPED

    java_version = _read_version(root_pom)
    if not java_version:
        for sub_pom in sorted(project_path.glob("*/pom.xml")):
            java_version = _read_version(sub_pom)
            if java_version:
                logger.info(f"Java version found in submodule: {sub_pom.parent.name}")
                break

    if not java_version or not VALID_VERSION.match(java_version):
        return VersionFileOutcome.SKIPPED

    version_file.write_text(f"{java_version}\n")
    logger.info(f"Created {version_file} ({java_version})")
    return VersionFileOutcome.WRITTEN
