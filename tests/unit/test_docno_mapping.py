"""
Unit tests for docno mappings
Tests the scheme registry, artifact loading, lookups and artifact writers
"""

import os
import struct
import pytest

from doccount.common.docno_mapping import (
    MAPPING_SCHEMES,
    DocnoMapping,
    TrecDocnoMapping,
    TsvDocnoMapping,
    UnknownMappingSchemeError,
    create_mapping,
    register_mapping,
)
from doccount.common.errors import ConfigurationError, DocnoNotFoundError, MappingLoadError


class TestRegistry:
    """Tests for selecting mapping classes by scheme name"""

    def test_builtin_schemes_registered(self):
        assert MAPPING_SCHEMES["trec"] is TrecDocnoMapping
        assert MAPPING_SCHEMES["tsv"] is TsvDocnoMapping

    def test_create_mapping_returns_fresh_instances(self):
        first = create_mapping("trec")
        second = create_mapping("trec")
        assert isinstance(first, TrecDocnoMapping)
        assert first is not second

    def test_unknown_scheme_is_configuration_error(self):
        with pytest.raises(UnknownMappingSchemeError) as exc_info:
            create_mapping("clueweb")
        assert isinstance(exc_info.value, ConfigurationError)
        assert "clueweb" in str(exc_info.value)

    def test_register_custom_scheme(self):
        @register_mapping("test-identity")
        class IdentityMapping(DocnoMapping):
            def load(self, path, fs=None):
                pass

            def get_docno(self, docid):
                return int(docid)

            def get_docid(self, docno):
                return str(docno)

            def __len__(self):
                return 0

            @classmethod
            def write_mapping(cls, docids, path, fs=None):
                return 0

        try:
            mapping = create_mapping("test-identity")
            assert mapping.resolve("42") == 42
            assert IdentityMapping.scheme == "test-identity"
        finally:
            MAPPING_SCHEMES.pop("test-identity", None)

    def test_conflicting_registration_rejected(self):
        with pytest.raises(ValueError):
            register_mapping("trec")(TsvDocnoMapping)


class TestTrecDocnoMapping:
    """Tests for the binary sorted-table mapping"""

    def test_docnos_follow_sorted_order(self, temp_dir):
        path = os.path.join(temp_dir, "mapping.dat")
        assert TrecDocnoMapping.write_mapping(["C", "A", "B", "A"], path) == 3

        mapping = TrecDocnoMapping()
        mapping.load(path)

        assert len(mapping) == 3
        assert [mapping.get_docno(d) for d in ("A", "B", "C")] == [1, 2, 3]
        assert [mapping.get_docid(n) for n in (1, 2, 3)] == ["A", "B", "C"]

    def test_file_layout(self, temp_dir):
        path = os.path.join(temp_dir, "mapping.dat")
        TrecDocnoMapping.write_mapping(["FT911-2", "FT911-1"], path)
        with open(path, "rb") as f:
            data = f.read()
        assert data == (struct.pack(">i", 2) + struct.pack(">H", 7) + b"FT911-1"
                        + struct.pack(">H", 7) + b"FT911-2")

    def test_unknown_docid_raises_lookup_error(self, trec_mapping):
        mapping = TrecDocnoMapping()
        mapping.load(trec_mapping)
        with pytest.raises(DocnoNotFoundError):
            mapping.get_docno("NOT-THERE")
        with pytest.raises(LookupError):
            mapping.get_docno("DOC-999")

    def test_docno_out_of_range(self, trec_mapping):
        mapping = TrecDocnoMapping()
        mapping.load(trec_mapping)
        with pytest.raises(DocnoNotFoundError):
            mapping.get_docid(0)
        with pytest.raises(DocnoNotFoundError):
            mapping.get_docid(len(mapping) + 1)

    def test_docnos_are_injective(self, trec_mapping, sharded_collection):
        _, docids = sharded_collection
        mapping = TrecDocnoMapping()
        mapping.load(trec_mapping)
        docnos = [mapping.get_docno(d) for d in docids]
        assert len(set(docnos)) == len(docids)
        assert sorted(docnos) == list(range(1, len(docids) + 1))

    def test_missing_file(self, temp_dir):
        with pytest.raises(MappingLoadError):
            TrecDocnoMapping().load(os.path.join(temp_dir, "absent.dat"))

    def test_truncated_header(self, temp_dir):
        path = os.path.join(temp_dir, "short.dat")
        with open(path, "wb") as f:
            f.write(b"\x00\x00")
        with pytest.raises(MappingLoadError):
            TrecDocnoMapping().load(path)

    def test_truncated_entries(self, temp_dir):
        path = os.path.join(temp_dir, "truncated.dat")
        with open(path, "wb") as f:
            f.write(struct.pack(">i", 2) + struct.pack(">H", 1) + b"A" + struct.pack(">H", 5) + b"B")
        with pytest.raises(MappingLoadError):
            TrecDocnoMapping().load(path)

    def test_trailing_bytes(self, temp_dir):
        path = os.path.join(temp_dir, "trailing.dat")
        with open(path, "wb") as f:
            f.write(struct.pack(">i", 1) + struct.pack(">H", 1) + b"A" + b"junk")
        with pytest.raises(MappingLoadError):
            TrecDocnoMapping().load(path)

    def test_unsorted_table_rejected(self, temp_dir):
        path = os.path.join(temp_dir, "unsorted.dat")
        with open(path, "wb") as f:
            f.write(struct.pack(">i", 2) + struct.pack(">H", 1) + b"B" + struct.pack(">H", 1) + b"A")
        with pytest.raises(MappingLoadError):
            TrecDocnoMapping().load(path)

    def test_text_file_is_corrupt_artifact(self, abc_mapping):
        with pytest.raises(MappingLoadError):
            TrecDocnoMapping().load(abc_mapping)


class TestTsvDocnoMapping:
    """Tests for the explicit docid/docno table"""

    def test_explicit_numbers(self, tsv_mapping_factory):
        path = tsv_mapping_factory({"X": 10, "Y": 3, "Z": 7})
        mapping = TsvDocnoMapping()
        mapping.load(path)
        assert mapping.get_docno("X") == 10
        assert mapping.get_docno("Y") == 3
        assert mapping.get_docid(7) == "Z"
        assert len(mapping) == 3

    def test_blank_lines_ignored(self, temp_dir):
        path = os.path.join(temp_dir, "blank.tsv")
        with open(path, "w") as f:
            f.write("A\t1\n\nB\t2\n")
        mapping = TsvDocnoMapping()
        mapping.load(path)
        assert len(mapping) == 2

    def test_duplicate_docid_rejected(self, temp_dir):
        path = os.path.join(temp_dir, "dup.tsv")
        with open(path, "w") as f:
            f.write("A\t1\nA\t2\n")
        with pytest.raises(MappingLoadError):
            TsvDocnoMapping().load(path)

    def test_duplicate_docno_rejected(self, temp_dir):
        path = os.path.join(temp_dir, "dup.tsv")
        with open(path, "w") as f:
            f.write("A\t1\nB\t1\n")
        with pytest.raises(MappingLoadError):
            TsvDocnoMapping().load(path)

    def test_malformed_lines_rejected(self, temp_dir):
        for content in ("A 1\n", "A\tone\n", "A\t1\t2\n"):
            path = os.path.join(temp_dir, "bad.tsv")
            with open(path, "w") as f:
                f.write(content)
            with pytest.raises(MappingLoadError):
                TsvDocnoMapping().load(path)

    def test_unknown_docid(self, abc_mapping):
        mapping = TsvDocnoMapping()
        mapping.load(abc_mapping)
        with pytest.raises(DocnoNotFoundError):
            mapping.get_docno("D")
        with pytest.raises(DocnoNotFoundError):
            mapping.get_docid(4)

    def test_write_mapping_numbers_sorted_docids(self, temp_dir):
        path = os.path.join(temp_dir, "written.tsv")
        assert TsvDocnoMapping.write_mapping(["b", "a", "c"], path) == 3
        with open(path) as f:
            assert f.read() == "a\t1\nb\t2\nc\t3\n"
