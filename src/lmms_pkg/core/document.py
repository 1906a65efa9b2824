"""
Access to the XML document of an LMMS project.

Only the handful of elements that point at external files are understood here:
sample players, SoundFont players and sample clips. Everything else in the
document is carried through untouched.

Parsing goes through defusedxml because project files also come out of
packages downloaded from other people.
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Type

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as DefusedET

from .config import SUPPORTED_VERSIONS
from .errors import InvalidXmlFileError, LmmsPkgError, NonExistingFileError, PackageExportError

PROJECT_ROOT_TAG = "lmms-project"
SONG_TYPE = "song"

XML_HEADER = '<?xml version="1.0"?>\n<!DOCTYPE lmms-project>\n'


class ResourceKind(str, Enum):
    """Element kinds carrying a ``src`` attribute that names an external file."""

    AUDIO_SAMPLE_PLAYER = "audiofileprocessor"
    SOUNDFONT_PLAYER = "sf2player"
    SAMPLE_CLIP = "sampletco"


RESOURCE_TAGS = frozenset(kind.value for kind in ResourceKind)


@dataclass
class ProjectReference:
    """A resource-bearing element, edited in place inside its document."""

    element: ET.Element

    @property
    def kind(self) -> ResourceKind:
        return ResourceKind(self.element.tag)

    @property
    def src(self) -> str:
        return self.element.get("src") or ""

    def set_src(self, new_path: str) -> None:
        self.element.set("src", new_path)


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid


@dataclass(frozen=True)
class ProjectInfo:
    """Summary values shown by ``lmms-pkg info``."""

    creator_version: Optional[str]
    format_version: Optional[str]
    bpm: Optional[str]
    timesig_numerator: Optional[str]
    timesig_denominator: Optional[str]

    @property
    def time_signature(self) -> Optional[str]:
        if self.timesig_numerator is None or self.timesig_denominator is None:
            return None
        return f"{self.timesig_numerator}/{self.timesig_denominator}"


def iter_elements(root: ET.Element) -> Iterable[ET.Element]:
    """Depth-first, pre-order walk over every descendant of ``root``.

    Uses an explicit stack so deeply nested documents cannot hit the
    recursion limit.
    """
    stack = list(reversed(list(root)))
    while stack:
        element = stack.pop()
        yield element
        stack.extend(reversed(list(element)))


class ProjectDocument:
    """A parsed LMMS project plus the operations the packager needs on it."""

    def __init__(self, root: ET.Element, path: Optional[Path] = None):
        self.root = root
        self.path = path

    @classmethod
    def load(cls, path: Path) -> "ProjectDocument":
        path = Path(path)
        if not path.is_file():
            raise NonExistingFileError(f'"{path}" does not exist.')
        try:
            tree = DefusedET.parse(str(path))
        except (DefusedET.ParseError, DefusedXmlException) as e:
            raise InvalidXmlFileError(f'Invalid XML file: "{path}": {e}') from e
        return cls(tree.getroot(), path)

    @classmethod
    def from_bytes(cls, data: bytes, name: str = "<buffer>") -> "ProjectDocument":
        try:
            root = DefusedET.fromstring(data)
        except (DefusedET.ParseError, DefusedXmlException) as e:
            raise InvalidXmlFileError(f'Invalid XML content in "{name}": {e}') from e
        return cls(root)

    def resource_elements(self) -> List[ProjectReference]:
        """Every sample player, SoundFont player and sample clip, in document order."""
        return [
            ProjectReference(element)
            for element in iter_elements(self.root)
            if element.tag in RESOURCE_TAGS
        ]

    @staticmethod
    def set_resource_attribute(reference: ProjectReference, new_path: str) -> None:
        reference.set_src(new_path)

    def validate(self, supported_versions: Optional[Iterable[str]] = None) -> ValidationResult:
        """Check that this is a song project written by a supported LMMS release.

        A missing ``type`` or ``creatorversion`` attribute is accepted; older
        LMMS releases did not always write them.
        """
        root = self.root
        if root.tag != PROJECT_ROOT_TAG:
            return ValidationResult(
                False,
                f"not a recognized project: root element is <{root.tag}>, "
                f"expected <{PROJECT_ROOT_TAG}>",
            )

        project_type = root.get("type")
        if project_type is not None and project_type != SONG_TYPE:
            return ValidationResult(
                False, f'not a song project: type is "{project_type}", expected "{SONG_TYPE}"'
            )

        versions = list(SUPPORTED_VERSIONS if supported_versions is None else supported_versions)
        creator_version = root.get("creatorversion")
        if creator_version is not None and creator_version not in versions:
            return ValidationResult(
                False, f"unsupported version: LMMS {creator_version} projects are not supported"
            )

        return ValidationResult(True)

    def info(self) -> ProjectInfo:
        head = self.root.find("head")

        def head_value(name: str) -> Optional[str]:
            if head is None:
                return None
            value = head.get(name)
            if value is None:
                # Automated values are stored as child elements instead
                child = head.find(name)
                value = child.get("value") if child is not None else None
            return value

        return ProjectInfo(
            creator_version=self.root.get("creatorversion"),
            format_version=self.root.get("version"),
            bpm=head_value("bpm"),
            timesig_numerator=head_value("timesig_numerator"),
            timesig_denominator=head_value("timesig_denominator"),
        )

    def save(
        self,
        path: Optional[Path] = None,
        *,
        error_cls: Type[LmmsPkgError] = PackageExportError,
    ) -> Path:
        """Write the document back to disk, keeping the LMMS doctype line."""
        target = Path(path) if path is not None else self.path
        if target is None:
            raise error_cls("Cannot save the project: no destination path.")
        body = ET.tostring(self.root, encoding="unicode")
        try:
            target.write_text(XML_HEADER + body + "\n", encoding="utf-8")
        except OSError as e:
            raise error_cls(
                f'Cannot save updated configuration into the project "{target}": {e}'
            ) from e
        return target
