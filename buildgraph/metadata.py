"""
Reading and writing of the shared assembly metadata file (`SolutionInfo.cs`).

Only `[assembly: AssemblyXxx("...")]` attributes are understood; anything else in
the file is dropped when it is rewritten.
"""

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from .exceptions import MetadataError

_ATTRIBUTE_PATTERN = re.compile(
    r'^\s*\[assembly:\s*(?:System\.Reflection\.)?Assembly(?P<name>\w+?)(?:Attribute)?'
    r'\(\s*"(?P<value>(?:[^"\\]|\\.)*)"\s*\)\s*\]',
    re.MULTILINE,
)

# attribute name -> field name, in the order attributes are written
_ATTRIBUTES: dict[str, str] = {
    "Company": "company",
    "Description": "description",
    "Product": "product",
    "Title": "title",
    "Copyright": "copyright",
    "Version": "version",
    "FileVersion": "file_version",
    "InformationalVersion": "informational_version",
}

_HEADER = """\
//------------------------------------------------------------------------------
// <auto-generated>
//     This file is maintained by the UpdateAssemblyVersion task.
// </auto-generated>
//------------------------------------------------------------------------------

using System.Reflection;

"""


class AssemblyMetadata(BaseModel):
    version: str | None = None
    file_version: str | None = None
    informational_version: str | None = None
    company: str | None = None
    description: str | None = None
    product: str | None = None
    title: str | None = None
    copyright: str | None = None

    model_config = ConfigDict(extra="forbid", frozen=True)


def _unescape(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def parse_metadata(path: Path) -> AssemblyMetadata:
    try:
        text = path.read_text(encoding="utf-8-sig")
    except OSError as e:
        raise MetadataError(str(path), e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise MetadataError(str(path), f"not valid UTF-8 ({e.reason})") from e

    fields: dict[str, str] = {}
    for match in _ATTRIBUTE_PATTERN.finditer(text):
        if field := _ATTRIBUTES.get(match["name"]):
            fields[field] = _unescape(match["value"])

    return AssemblyMetadata(**fields)


def render_metadata(metadata: AssemblyMetadata) -> str:
    lines = [
        f'[assembly: Assembly{attribute}("{_escape(value)}")]'
        for attribute, field in _ATTRIBUTES.items()
        if (value := getattr(metadata, field)) is not None
    ]
    return _HEADER + "\n".join(lines) + "\n"


def write_metadata(path: Path, metadata: AssemblyMetadata) -> bool:
    """
    Write `metadata` to `path`. Returns False, leaving the file untouched, when its
    content would not change.
    """
    rendered = render_metadata(metadata)

    try:
        if path.read_text(encoding="utf-8") == rendered:
            return False
    except FileNotFoundError:
        path.parent.mkdir(parents=True, exist_ok=True)

    with path.open("w", encoding="utf-8", newline="\n") as f:
        f.write(rendered)

    return True
