import pytest
import stat

from io import BytesIO
from zipfile import ZipFile, Path as ZipPath, ZIP_DEFLATED, ZIP_STORED

from wheelsmith import WheelArchive, build_wheel


class TestEmptyWheelStructure:

    distname = 'my_dist'
    version = '1.0.0'

    @pytest.fixture
    def wheelarchive(self):
        wa = WheelArchive(self.distname, self.version)
        wa.to_bytes()
        return wa

    @pytest.fixture
    def wheel(self, wheelarchive):
        return ZipFile(BytesIO(wheelarchive.to_bytes()))

    @pytest.fixture
    def distinfo(self, wheel):
        return ZipPath(wheel, f'{self.distname}-{self.version}.dist-info/')

    def test_contains_only_metadata_files(self, wheel):
        assert wheel.namelist() == [
            'my_dist-1.0.0.dist-info/METADATA',
            'my_dist-1.0.0.dist-info/WHEEL',
            'my_dist-1.0.0.dist-info/RECORD',
        ]

    def test_has_no_synonym_files(self, wheel):
        assert len(set(wheel.namelist())) == len(wheel.namelist())

    def test_metadata_is_from_wheelarchive(self, distinfo, wheelarchive):
        metadata = distinfo / 'METADATA'
        assert metadata.read_text() == str(wheelarchive.metadata)

    def test_wheeldata_is_from_wheelarchive(self, distinfo, wheelarchive):
        wheeldata = distinfo / 'WHEEL'
        assert wheeldata.read_text() == str(wheelarchive.wheeldata)

    def test_record_is_from_wheelarchive(self, distinfo, wheelarchive):
        record = distinfo / 'RECORD'
        assert record.read_text() == str(wheelarchive.record)

    def test_record_ends_with_its_own_entry(self, distinfo):
        record = (distinfo / 'RECORD').read_text()
        assert record.splitlines()[-1] == 'my_dist-1.0.0.dist-info/RECORD,,'


class TestLongMetadataLine:

    long_requirement = "a" * 400

    @pytest.fixture
    def wheel(self):
        wa = WheelArchive('my_dist', '1.0.0')
        wa.add_metadata({'Requires-Dist': [self.long_requirement]})
        return ZipFile(BytesIO(wa.to_bytes()))

    def test_long_metadata_line_is_not_wrapped(self, wheel):
        metadata = wheel.read('my_dist-1.0.0.dist-info/METADATA').decode()
        assert f"Requires-Dist: {self.long_requirement}\n" in metadata


class TestZipLayout:

    @pytest.fixture
    def data(self, sample_wheel):
        sample_wheel.writestr('z_last.py', b'')
        sample_wheel.writestr('a_first.py', b'')
        return sample_wheel.to_bytes()

    def test_entries_are_in_fixed_order(self, data):
        assert ZipFile(BytesIO(data)).namelist() == [
            'a_first.py',
            'my_dist/__init__.py',
            'my_dist/core.py',
            'z_last.py',
            'my_dist-1.0.0.dist-info/METADATA',
            'my_dist-1.0.0.dist-info/WHEEL',
            'my_dist-1.0.0.dist-info/RECORD',
        ]

    def test_entries_have_fixed_timestamp(self, data):
        for zinfo in ZipFile(BytesIO(data)).infolist():
            assert zinfo.date_time == (1980, 1, 1, 0, 0, 0)

    def test_entries_have_fixed_mode(self, data):
        for zinfo in ZipFile(BytesIO(data)).infolist():
            assert zinfo.external_attr >> 16 == stat.S_IFREG | 0o644
            assert zinfo.create_system == 3

    def test_default_compression_is_deflate(self, data):
        for zinfo in ZipFile(BytesIO(data)).infolist():
            assert zinfo.compress_type == ZIP_DEFLATED

    def test_stored_compression(self):
        wa = WheelArchive('_', '0', compression=ZIP_STORED)
        wa.writestr('file', b'contents')
        for zinfo in ZipFile(BytesIO(wa.to_bytes())).infolist():
            assert zinfo.compress_type == ZIP_STORED

    def test_custom_date_time(self):
        wa = WheelArchive('_', '0', date_time=(2020, 2, 2, 12, 0, 0))
        for zinfo in ZipFile(BytesIO(wa.to_bytes())).infolist():
            assert zinfo.date_time == (2020, 2, 2, 12, 0, 0)


class TestReproducibility:

    files = {
        'pkg/__init__.py': b'',
        'pkg/module.py': b'x = 1\n' * 100,
        'pkg-1.0.data/scripts/tool': b'#!python\n',
    }
    fields = [('Summary', 'Reproducible'), ('Requires-Dist', 'packaging')]

    def test_same_inputs_give_identical_bytes(self):
        assert build_wheel('pkg', '1.0', self.files, self.fields) \
            == build_wheel('pkg', '1.0', self.files, self.fields)

    def test_order_of_writes_does_not_matter(self):
        reversed_files = dict(reversed(list(self.files.items())))
        assert build_wheel('pkg', '1.0', reversed_files, self.fields) \
            == build_wheel('pkg', '1.0', self.files, self.fields)

    def test_different_contents_give_different_bytes(self):
        changed = dict(self.files, **{'pkg/__init__.py': b'#'})
        assert build_wheel('pkg', '1.0', changed, self.fields) \
            != build_wheel('pkg', '1.0', self.files, self.fields)

    def test_built_wheel_verifies(self):
        data = build_wheel('pkg', '1.0', self.files, self.fields)
        assert WheelArchive.from_bytes(data).verify() == []
