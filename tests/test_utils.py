# tests/test_utils.py
import logging
import pytest # type: ignore

from pycodon_barcode import utils


# --- Tests for codon enumeration ---

def test_all_codons_canonical_order():
    """64 codons, lexicographic over A, C, G, T."""
    codons = utils.get_all_codons()
    assert len(codons) == 64
    assert len(set(codons)) == 64
    assert codons[:5] == ["AAA", "AAC", "AAG", "AAT", "ACA"]
    assert codons[-1] == "TTT"
    assert codons.index("ATG") == 14
    assert codons == sorted(codons) # ACGT happens to be alphabetical


# --- Tests for genetic code lookup ---

def test_get_genetic_code_standard(standard_genetic_code_dict):
    assert utils.get_genetic_code(1) == standard_genetic_code_dict

def test_get_genetic_code_bacterial_matches_standard_translation(standard_genetic_code_dict):
    """Table 11 only differs from table 1 by its start codons."""
    assert utils.get_genetic_code(11) == standard_genetic_code_dict

def test_get_genetic_code_default_is_bacterial():
    assert utils.DEFAULT_GENETIC_CODE_ID == 11
    assert utils.get_genetic_code() == utils.get_genetic_code(11)

def test_get_genetic_code_vertebrate_mitochondrial():
    code = utils.get_genetic_code(2)
    assert code['ATA'] == 'M'
    assert code['TGA'] == 'W'
    assert code['AGA'] == '*'
    assert code['AGG'] == '*'

def test_get_genetic_code_returns_copy():
    code = utils.get_genetic_code(1)
    code['ATG'] = 'X'
    assert utils.get_genetic_code(1)['ATG'] == 'M'

@pytest.mark.parametrize("code_id", [1, 2, 3, 4, 5, 6, 9, 10, 11, 12, 13, 14, 15, 16, 21, 22, 23])
def test_get_genetic_code_supported_ids(code_id):
    code = utils.get_genetic_code(code_id)
    assert len(code) == 64
    assert set(code) == set(utils.get_all_codons())

@pytest.mark.parametrize("code_id", [0, 7, 8, 999, -1, "11", None])
def test_get_genetic_code_unknown_id(code_id, caplog):
    caplog.set_level(logging.ERROR)
    with pytest.raises(utils.UnknownCodeTableError):
        utils.get_genetic_code(code_id)
    assert "is not a known NCBI translation table" in caplog.text

def test_unknown_code_table_error_is_value_error():
    assert issubclass(utils.UnknownCodeTableError, ValueError)

def test_available_genetic_codes():
    codes = utils.get_available_genetic_codes()
    assert list(codes) == sorted(codes)
    assert "Bacterial" in codes[11]
    assert "Vertebrate Mitochondrial" in codes[2]
    assert 7 not in codes and 8 not in codes

def test_available_genetic_codes_names_are_clean():
    """Biopython pads table names with None; those must not leak into the listing."""
    codes = utils.get_available_genetic_codes()
    assert len(codes) > 20
    for code_id, name in codes.items():
        assert isinstance(name, str) and name, code_id
        assert "None" not in name, code_id
        assert not name.endswith(", "), code_id
    assert codes[11] == "Bacterial, Archaeal, Plant Plastid"


# --- Tests for synonymous codons ---

def test_get_synonymous_codons(standard_genetic_code_dict):
    syn = utils.get_synonymous_codons(standard_genetic_code_dict)
    assert sorted(syn['L']) == ['CTA', 'CTC', 'CTG', 'CTT', 'TTA', 'TTG']
    assert syn['M'] == ['ATG']
    assert sorted(syn['*']) == ['TAA', 'TAG', 'TGA']
    assert sum(len(codons) for codons in syn.values()) == 64

def test_get_synonymous_codons_empty(caplog):
    caplog.set_level(logging.WARNING)
    assert utils.get_synonymous_codons({}) == {}
    assert "empty genetic code" in caplog.text


# --- Tests for the codon index ---

@pytest.mark.parametrize("code_id", list(utils.get_available_genetic_codes()))
def test_codon_index_groups_partition_columns(code_id):
    """Every column belongs to exactly one synonymous group, for every table."""
    index = utils.build_codon_index(code_id)
    all_columns = [column for members in index.groups.values() for column in members]
    assert len(all_columns) == 64
    assert sorted(all_columns) == list(range(64))
    assert index.genetic_code_id == code_id

def test_codon_index_layout(bacterial_codon_index):
    index = bacterial_codon_index
    assert index.codons == tuple(utils.get_all_codons())
    assert all(index.columns[codon] == column for column, codon in enumerate(index.codons))
    # First-seen order: CTx columns come before TTA/TTG
    assert index.groups['L'] == (28, 29, 30, 31, 60, 62)
    assert index.groups['M'] == (14,)
    assert [index.codons[c] for c in index.groups['*']] == ['TAA', 'TAG', 'TGA']
    assert len(index.groups) == 21

def test_codon_index_follows_table(vertebrate_mito_codon_index):
    index = vertebrate_mito_codon_index
    assert [index.codons[c] for c in index.groups['M']] == ['ATA', 'ATG']
    assert [index.codons[c] for c in index.groups['W']] == ['TGA', 'TGG']
    assert [index.codons[c] for c in index.groups['*']] == ['AGA', 'AGG', 'TAA', 'TAG']

def test_build_codon_index_unknown_table():
    with pytest.raises(utils.UnknownCodeTableError):
        utils.build_codon_index(7)

def test_build_codon_index_from_incomplete_code(standard_genetic_code_dict, caplog):
    caplog.set_level(logging.ERROR)
    del standard_genetic_code_dict['GGG']
    with pytest.raises(ValueError, match="GGG"):
        utils.build_codon_index_from_code(standard_genetic_code_dict)
    assert "missing from the genetic code" in caplog.text

def test_build_codon_index_from_custom_code():
    """An externally supplied table where every codon is its own group."""
    code = {codon: codon for codon in utils.get_all_codons()}
    index = utils.build_codon_index_from_code(code)
    assert len(index.groups) == 64
    assert index.genetic_code_id is None
