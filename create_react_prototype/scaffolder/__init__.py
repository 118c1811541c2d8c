"""Scaffolding for new component-library projects.

Takes the target project's ``package.json`` and fills the project folder
with the bundled templates (license, docs, demo source, example app and
storybook), substituting ``[placeholder]`` tokens on the way.

Quick usage::

    from create_react_prototype.scaffolder import Scaffolder, adjust_package_json

    await adjust_package_json(options, paths, pm)
    await Scaffolder(paths, pm, LicenseFetcher(), logger).copy_scaffolding(options)
"""

from create_react_prototype.scaffolder.copier import Scaffolder
from create_react_prototype.scaffolder.formatter import format_template, with_json_variants
from create_react_prototype.scaffolder.license import LicenseFetcher, LicenseLookupError
from create_react_prototype.scaffolder.manifest import (
    ManifestError,
    PackageJson,
    adjust_package_json,
    resolve_dependency,
)

__all__ = [
    "LicenseFetcher",
    "LicenseLookupError",
    "ManifestError",
    "PackageJson",
    "Scaffolder",
    "adjust_package_json",
    "format_template",
    "resolve_dependency",
    "with_json_variants",
]
