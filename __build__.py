import tarfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import toml
from wheelsmith import WheelArchive


def get_config(path: str = 'pyproject.toml') -> Dict[str, Any]:
    """Read pyproject.toml"""
    project_config = toml.load(path)
    config = project_config['project']
    return config


def metadata_fields(config: Dict[str, Any]) -> List[Tuple[str, str]]:
    """Translate the [project] table into METADATA fields."""
    fields = []
    if 'description' in config:
        fields.append(('Summary', config['description']))
    if 'requires-python' in config:
        fields.append(('Requires-Python', config['requires-python']))
    if config.get('keywords'):
        fields.append(('Keywords', ','.join(config['keywords'])))
    for author in config.get('authors', []):
        if 'name' in author:
            fields.append(('Author', author['name']))
    for label, url in config.get('urls', {}).items():
        fields.append(('Project-URL', f'{label}, {url}'))
    fields.extend(('Classifier', c) for c in config.get('classifiers', []))
    fields.extend(('Requires-Dist', d) for d in config.get('dependencies', []))
    for extra, deps in config.get('optional-dependencies', {}).items():
        fields.append(('Provides-Extra', extra))
        fields.extend(
            ('Requires-Dist', f'{d}; extra == "{extra}"') for d in deps
        )
    return fields


def build_sdist(
    sdist_directory: str, config_settings: Dict[str, Any] = None
) -> str:
    config = get_config()
    name = config['name']
    version = config['version']
    distname = f'{name}-{version}'
    filename = f'{distname}.tar.gz'
    filepath = Path(sdist_directory) / filename

    with tarfile.open(filepath, 'w:gz', format=tarfile.PAX_FORMAT) as sdist:
        sdist.add('./', arcname=distname, filter=None)
        return filename


def build_wheel(
    wheel_directory: str,
    config_settings: Optional[Dict[str, Any]] = None,
    metadata_directory: Optional[str] = None
) -> str:
    config = get_config()

    # Platform, abi, and language tags stay as defaults: "py3-none-any"
    wa = WheelArchive(config['name'], config['version'])
    wa.add_metadata(metadata_fields(config))

    if 'license' in config and isinstance(config['license'], str):
        wa.set_license_expression(config['license'])

    # Make sure PyPI page renders nicely
    readme = config.get('readme')
    if readme is not None:
        wa.metadata.add('Description-Content-Type', 'text/markdown')
        wa.metadata.body = Path(readme).read_text()

    # Add the code - it will install inside site-packages/wheelsmith.py
    wa.writestr('wheelsmith.py', Path('wheelsmith.py').read_bytes())
    wa.write_to_directory(wheel_directory)
    return wa.filename

# Done!
# 🧀
