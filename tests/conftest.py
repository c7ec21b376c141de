import pytest
import zipfile

from io import BytesIO

from wheelsmith import WheelArchive


@pytest.fixture
def wa():
    return WheelArchive('_', '0')


@pytest.fixture
def sample_wheel():
    wa = WheelArchive('my_dist', '1.0.0')
    wa.writestr('my_dist/__init__.py', b'VERSION = "1.0.0"\n')
    wa.writestr('my_dist/core.py', b'def run():\n    return 42\n')
    wa.add_metadata({'Summary': 'A sample distribution'})
    return wa


@pytest.fixture
def sample_bytes(sample_wheel):
    return sample_wheel.to_bytes()


@pytest.fixture
def make_zip():
    """Return a function that zips a mapping of paths to contents."""
    def make_zip(files, compression=zipfile.ZIP_DEFLATED):
        buf = BytesIO()
        with zipfile.ZipFile(buf, 'w', compression=compression) as zf:
            for path, data in files.items():
                zf.writestr(path, data)
        return buf.getvalue()
    return make_zip


@pytest.fixture
def rezip(make_zip):
    """Return a function that copies a zip, replacing some of its files.

    Files mapped to None are left out of the copy. The rest of the contents,
    RECORD included, is copied verbatim.
    """
    def rezip(data, changes):
        with zipfile.ZipFile(BytesIO(data)) as zf:
            files = {name: zf.read(name) for name in zf.namelist()}
        files.update(changes)
        return make_zip({p: d for p, d in files.items() if d is not None})
    return rezip
