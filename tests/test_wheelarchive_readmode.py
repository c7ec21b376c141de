import pytest
import zipfile

from hashlib import blake2b

from wheelsmith import (
    WheelArchive, open_wheel, IntegrityError, DigestMismatch, MissingFile,
    UnlistedFile, SizeMismatch, ArchiveCorruptError, BadWheelFileError,
    InvalidFilenameError, UnsupportedHashTypeError, Digester,
)


class TestWheelArchiveReadMode:

    @pytest.fixture
    def read_wheel(self, sample_bytes):
        return WheelArchive.from_bytes(sample_bytes)

    def test_reads_metadata(self, read_wheel, sample_wheel):
        assert read_wheel.metadata == sample_wheel.metadata

    def test_reads_wheeldata(self, read_wheel, sample_wheel):
        assert read_wheel.wheeldata == sample_wheel.wheeldata

    def test_reads_record(self, read_wheel, sample_wheel):
        assert read_wheel.record == sample_wheel.record

    def test_reads_identity(self, read_wheel, sample_wheel):
        assert read_wheel.distname == sample_wheel.distname
        assert read_wheel.version == sample_wheel.version
        assert read_wheel.filename == sample_wheel.filename

    def test_reads_files(self, read_wheel):
        assert read_wheel.namelist() == ['my_dist/__init__.py',
                                         'my_dist/core.py']
        assert read_wheel.read('my_dist/core.py') == (
            b'def run():\n    return 42\n'
        )

    def test_metadata_files_are_readable(self, read_wheel, sample_bytes):
        assert read_wheel.read('my_dist-1.0.0.dist-info/RECORD') \
            == str(read_wheel.record).encode()

    def test_is_read_only(self, read_wheel):
        assert read_wheel.finalized
        with pytest.raises(RuntimeError):
            read_wheel.writestr('file', b'')

    def test_to_bytes_returns_original_bytes(self, read_wheel, sample_bytes):
        assert read_wheel.to_bytes() is sample_bytes

    def test_verify_returns_no_discrepancies(self, read_wheel):
        assert read_wheel.verify() == []

    def test_open_wheel_is_an_alias(self, sample_bytes, sample_wheel):
        assert open_wheel(sample_bytes).metadata == sample_wheel.metadata

    def test_reads_tags(self):
        wa = WheelArchive('_', '0', language_tag='py2.py3',
                          abi_tag='abi3', platform_tag='win32', build_tag=5)
        read = WheelArchive.from_bytes(wa.to_bytes())
        assert read.filename == wa.filename
        assert read.build_tag == wa.build_tag

    def test_reads_entry_points(self):
        wa = WheelArchive('_', '0')
        wa.add_entry_point('console_scripts', 'tool', 'pkg:main')
        read = WheelArchive.from_bytes(wa.to_bytes())
        assert read.entry_points.get('console_scripts') == [('tool',
                                                             'pkg:main')]

    def test_reads_data_sections(self):
        wa = WheelArchive('_', '0')
        wa.writestr_data('scripts', 'tool', b'#!python\n')
        read = WheelArchive.from_bytes(wa.to_bytes())
        assert read.read_data('scripts') == {'tool': b'#!python\n'}


class TestWheelArchiveFromFile:

    def test_from_path(self, sample_wheel, tmp_path):
        path = sample_wheel.write_to_directory(tmp_path)
        assert WheelArchive.from_file(path).metadata == sample_wheel.metadata

    def test_from_str_path(self, sample_wheel, tmp_path):
        path = sample_wheel.write_to_directory(tmp_path)
        assert WheelArchive.from_file(str(path)).filename \
            == sample_wheel.filename

    def test_from_binary_file_object(self, sample_wheel, tmp_path):
        path = sample_wheel.write_to_directory(tmp_path)
        with open(path, 'rb') as f:
            assert WheelArchive.from_file(f).record == sample_wheel.record

    def test_keeps_the_given_filename(self, sample_bytes, tmp_path):
        path = tmp_path / 'My_Dist-1.0.0-py3-none-any.whl'
        path.write_bytes(sample_bytes)
        assert WheelArchive.from_file(path).filename == path.name

    def test_distname_mismatch_raises(self, sample_bytes, tmp_path):
        path = tmp_path / 'other-1.0.0-py3-none-any.whl'
        path.write_bytes(sample_bytes)
        with pytest.raises(BadWheelFileError):
            WheelArchive.from_file(path)

    @pytest.mark.parametrize('filename', [
        'my_dist-2.0.0-py3-none-any.whl',
        'my_dist-1.0.0.post1-py3-none-any.whl',
        'my_dist-latest-py3-none-any.whl',
    ])
    def test_version_mismatch_raises(self, sample_bytes, filename):
        with pytest.raises(BadWheelFileError):
            WheelArchive.from_bytes(sample_bytes, filename=filename)

    def test_equivalent_version_spelling_is_accepted(self, sample_bytes):
        wa = WheelArchive.from_bytes(sample_bytes,
                                     filename='My.Dist-1.0-py3-none-any.whl')
        assert wa.distname == 'my_dist'

    def test_build_tag_mismatch_raises(self, sample_bytes, tmp_path):
        path = tmp_path / 'my_dist-1.0.0-5-py3-none-any.whl'
        path.write_bytes(sample_bytes)
        with pytest.raises(BadWheelFileError):
            WheelArchive.from_file(path)

    def test_invalid_filename_raises(self, sample_bytes):
        with pytest.raises(InvalidFilenameError):
            WheelArchive.from_bytes(sample_bytes, filename='my_dist.whl')


class TestIntegrity:

    payload = 'my_dist/core.py'

    def test_single_byte_mutation_gives_one_digest_mismatch(self, sample_bytes,
                                                           rezip):
        mutated = b"def run():\n    return 43\n"
        data = rezip(sample_bytes, {self.payload: mutated})
        with pytest.raises(IntegrityError) as exc_info:
            WheelArchive.from_bytes(data)
        (discrepancy,) = exc_info.value.discrepancies
        assert isinstance(discrepancy, DigestMismatch)
        assert discrepancy.path == self.payload

    def test_error_carries_readable_archive(self, sample_bytes, rezip):
        data = rezip(sample_bytes, {self.payload: b'tampered'})
        with pytest.raises(IntegrityError) as exc_info:
            WheelArchive.from_bytes(data)
        archive = exc_info.value.archive
        assert archive.read(self.payload) == b'tampered'
        assert archive.distname == 'my_dist'

    def test_all_problems_are_reported_at_once(self, sample_bytes, rezip):
        data = rezip(sample_bytes, {
            self.payload: b'tampered',
            'my_dist/__init__.py': None,
            'my_dist/extra.py': b'',
        })
        with pytest.raises(IntegrityError) as exc_info:
            WheelArchive.from_bytes(data)
        assert [type(d) for d in exc_info.value.discrepancies] == [
            MissingFile, SizeMismatch, DigestMismatch, UnlistedFile,
        ]

    def test_message_lists_every_problem(self, sample_bytes, rezip):
        data = rezip(sample_bytes, {'my_dist/__init__.py': None,
                                    'my_dist/extra.py': b''})
        with pytest.raises(IntegrityError) as exc_info:
            WheelArchive.from_bytes(data)
        message = str(exc_info.value)
        assert 'my_dist/__init__.py' in message
        assert 'my_dist/extra.py' in message

    def test_without_verification_nothing_is_raised(self, sample_bytes,
                                                    rezip):
        data = rezip(sample_bytes, {self.payload: b'tampered'})
        wa = WheelArchive.from_bytes(data, verify=False)
        assert [d.path for d in wa.verify()] == [self.payload] * 2

    def test_verify_with_workers(self, sample_bytes, rezip):
        data = rezip(sample_bytes, {self.payload: b'tampered'})
        wa = WheelArchive.from_bytes(data, verify=False)
        assert wa.verify(workers=4) == wa.verify()

    @pytest.fixture
    def short_blake2b(self):
        return Digester('blake2b',
                        lambda data: blake2b(data, digest_size=16).digest())

    def test_custom_digester_roundtrip(self, short_blake2b):
        wa = WheelArchive('my_dist', '1.0.0', hash_algo=short_blake2b)
        wa.writestr(self.payload, b'def run():\n    return 42\n')
        data = wa.to_bytes()
        read = WheelArchive.from_bytes(data, hash_algo=short_blake2b)
        assert read.verify() == []
        assert read.record == wa.record
        assert open_wheel(data, hash_algo=short_blake2b).verify() == []

    def test_custom_digester_is_used_for_verification(self, short_blake2b,
                                                      rezip):
        wa = WheelArchive('my_dist', '1.0.0', hash_algo=short_blake2b)
        wa.writestr(self.payload, b'def run():\n    return 42\n')
        mutated = b'def run():\n    return 43\n'
        data = rezip(wa.to_bytes(), {self.payload: mutated})
        with pytest.raises(IntegrityError) as exc_info:
            WheelArchive.from_bytes(data, hash_algo=short_blake2b)
        (discrepancy,) = exc_info.value.discrepancies
        assert isinstance(discrepancy, DigestMismatch)

    def test_digester_unknown_to_hashlib(self, tmp_path):
        def length(data):
            return len(data).to_bytes(8, 'big')

        digester = Digester('xxhash64', length)
        wa = WheelArchive('my_dist', '1.0.0', hash_algo=digester)
        wa.writestr(self.payload, b'')
        path = wa.write_to_directory(tmp_path)
        assert WheelArchive.from_file(path, hash_algo=digester).verify() == []
        with pytest.raises(UnsupportedHashTypeError):
            WheelArchive.from_file(path)

    def test_integrity_error_is_value_error(self):
        assert issubclass(IntegrityError, ValueError)


class TestCorruptContainer:

    def test_not_a_zip(self):
        with pytest.raises(ArchiveCorruptError):
            WheelArchive.from_bytes(b'This is not a zip file')

    def test_truncated_zip(self, sample_bytes):
        with pytest.raises(ArchiveCorruptError):
            WheelArchive.from_bytes(sample_bytes[:len(sample_bytes) // 2])

    def test_crc_mismatch(self):
        wa = WheelArchive('_', '0', compression=zipfile.ZIP_STORED)
        wa.writestr('module.py', b'return 42\n')
        data = wa.to_bytes().replace(b'return 42', b'return 43', 1)
        with pytest.raises(ArchiveCorruptError):
            WheelArchive.from_bytes(data)

    def test_archive_corrupt_is_bad_wheel_file(self):
        assert issubclass(ArchiveCorruptError, BadWheelFileError)
