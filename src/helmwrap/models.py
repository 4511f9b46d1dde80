"""Data models for helmwrap.

This module provides the typed records decoded from helm's JSON output,
replacing loosely-typed dictionaries with frozen data classes.
"""

from dataclasses import dataclass
from typing import Any


def _require_str(data: dict[str, Any], key: str) -> str:
    """Fetch a string field from a decoded JSON object.

    Raises:
        KeyError: If the field is missing.
        TypeError: If the field is not a string.

    """
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"field '{key}' must be a string, got {type(value).__name__}")
    return value


@dataclass(frozen=True, slots=True)
class Chart:
    """A chart entry returned by `helm search repo`.

    Attributes:
        name: The chart name, qualified with its repository (e.g. 'bitnami/nginx').
        version: The chart version.
        app_version: The version of the packaged application, when reported.
        description: The chart description, when reported.

    """

    name: str
    version: str
    app_version: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Chart":
        """Build a Chart from one element of helm's JSON search output.

        Raises:
            KeyError: If 'name' or 'version' is missing.
            TypeError: If a field has the wrong type.

        """
        return cls(
            name=_require_str(data, "name"),
            version=_require_str(data, "version"),
            app_version=str(data.get("app_version") or ""),
            description=str(data.get("description") or ""),
        )


@dataclass(frozen=True, slots=True)
class InstalledRelease:
    """A release entry returned by `helm list`.

    Attributes:
        name: The release name.
        chart: The chart id, '<chart>-<version>'.
        app_version: The version of the app this release installed.
        revision: The release revision, kept as helm reports it.
        updated: Date/time of the last update; an opaque string.
        status: Release status (e.g. 'deployed', 'failed').
        namespace: The namespace of the release, when reported.

    """

    name: str
    chart: str
    app_version: str
    revision: str
    updated: str
    status: str
    namespace: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "InstalledRelease":
        """Build an InstalledRelease from one element of helm's JSON list output.

        Raises:
            KeyError: If a required field is missing.
            TypeError: If a field has the wrong type.

        """
        return cls(
            name=_require_str(data, "name"),
            chart=_require_str(data, "chart"),
            app_version=_require_str(data, "app_version"),
            revision=_require_str(data, "revision"),
            updated=_require_str(data, "updated"),
            status=_require_str(data, "status"),
            namespace=str(data.get("namespace") or ""),
        )
