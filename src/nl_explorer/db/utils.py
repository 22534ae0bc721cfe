from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional
import re


_JDBC_PREFIX_RE = re.compile(r"^jdbc:", re.IGNORECASE)
_ATHENA_SCHEME_RE = re.compile(r"^(?:jdbc:)?awsathena://", re.IGNORECASE)


def strip_jdbc_prefix(endpoint: str) -> str:
    """``jdbc:postgresql://host:5432/db`` -> ``postgresql://host:5432/db`` (libpq URI)."""
    return _JDBC_PREFIX_RE.sub("", (endpoint or "").strip())


@dataclass(frozen=True)
class AthenaEndpoint:
    """Connection settings parsed from an Athena connection string.

    Format (keys are case-insensitive, ``;``-separated)::

        awsathena://AwsRegion=us-east-1;S3OutputLocation=s3://bucket/prefix/;Workgroup=primary;Schema=weblogs

    Authentication is not part of the string beyond an optional ``Profile``;
    without one the default AWS credential-provider chain is used.
    """

    region: str
    output_location: Optional[str] = None
    workgroup: Optional[str] = None
    catalog: str = "AwsDataCatalog"
    schema: Optional[str] = None
    profile: Optional[str] = None


def parse_athena_endpoint(endpoint: str) -> AthenaEndpoint:
    s = (endpoint or "").strip()
    if not _ATHENA_SCHEME_RE.match(s):
        raise ValueError(f"Not an Athena connection string: {endpoint!r}")

    props: Dict[str, str] = {}
    for part in _ATHENA_SCHEME_RE.sub("", s).split(";"):
        if not part.strip():
            continue
        key, sep, value = part.partition("=")
        if not sep:
            raise ValueError(f"Malformed Athena connection property: {part!r}")
        props[key.strip().lower()] = value.strip()

    region = props.get("awsregion")
    if not region:
        raise ValueError("Athena connection string must set AwsRegion")

    return AthenaEndpoint(
        region=region,
        output_location=props.get("s3outputlocation") or None,
        workgroup=props.get("workgroup") or None,
        catalog=props.get("catalog") or "AwsDataCatalog",
        schema=props.get("schema") or None,
        profile=props.get("profile") or None,
    )

