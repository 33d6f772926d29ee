"""Tests for S01: STEP record writer, literal formatting and GlobalId generation."""

import re

import pytest

from tricad.steps.s01_ifc_export._guid import (
    IFC_GUID_ALPHABET,
    deterministic_guid,
    random_guid,
)
from tricad.steps.s01_ifc_export._step_writer import (
    StepWriter,
    bool_literal,
    format_real,
    point_literal,
    ref_list,
    step_string,
)

GUID_RE = re.compile(r"^[0-9A-Za-z_$]{22}$")


# ── GlobalId ──


class TestGuid:
    def test_random_guid_shape(self):
        for _ in range(50):
            assert GUID_RE.match(random_guid())

    def test_random_guids_differ(self):
        assert len({random_guid() for _ in range(1000)}) == 1000

    def test_deterministic_guid_stable(self):
        assert deterministic_guid("elem:abc") == deterministic_guid("elem:abc")
        assert GUID_RE.match(deterministic_guid("elem:abc"))

    def test_deterministic_guid_known_value(self):
        # Pinned output of FNV-1a("") = 0x811C9DC5 fed to xorshift32
        x = 0x811C9DC5
        expected = []
        for _ in range(22):
            x ^= (x << 13) & 0xFFFFFFFF
            x ^= x >> 17
            x ^= (x << 5) & 0xFFFFFFFF
            expected.append(IFC_GUID_ALPHABET[x & 63])
        assert deterministic_guid("") == "".join(expected)

    def test_deterministic_guid_no_collisions(self):
        ids = {deterministic_guid(f"elem:{i}") for i in range(10_000)}
        assert len(ids) == 10_000

    def test_deterministic_guid_non_ascii_seed(self):
        a = deterministic_guid("elem:mur-étage")
        b = deterministic_guid("elem:mur-etage")
        assert GUID_RE.match(a)
        assert a != b


# ── Record writer ──


class TestStepWriter:
    def test_ids_are_monotonic_from_one(self):
        s = StepWriter()
        assert s.add("IFCCARTESIANPOINT", "(0.,0.,0.)") == 1
        assert s.add("IFCDIRECTION", "(0.,0.,1.)") == 2
        assert s.add("IFCDIRECTION", "(1.,0.,0.)") == 3
        assert len(s) == 3

    def test_to_text_renders_in_order(self):
        s = StepWriter()
        p = s.add("IFCCARTESIANPOINT", "(0.,0.,0.)")
        s.add("IFCAXIS2PLACEMENT3D", f"#{p},$,$")
        assert s.to_text() == (
            "#1=IFCCARTESIANPOINT((0.,0.,0.));\n"
            "#2=IFCAXIS2PLACEMENT3D(#1,$,$);"
        )

    def test_count_by_type(self):
        s = StepWriter()
        s.add("IFCFACE", "(#1)")
        s.add("IFCFACE", "(#2)")
        s.add("IFCCLOSEDSHELL", "(#1,#2)")
        assert s.count("IFCFACE") == 2
        assert s.count("IfcClosedShell") == 1
        assert s.count("IFCWALL") == 0


# ── Literals ──


class TestLiterals:
    @pytest.mark.parametrize("value, expected", [
        (0, "0."),
        (-0.0, "0."),
        (1, "1."),
        (1.5, "1.5"),
        (-2.25, "-2.25"),
        (1.23456789, "1.234568"),
        (1e-7, "0."),
        (1e20, "1.E+20"),
        (float("nan"), "0."),
        (float("inf"), "0."),
        ("abc", "0."),
        (10**400, "0."),
    ])
    def test_format_real(self, value, expected):
        assert format_real(value) == expected

    def test_format_real_without_rounding(self):
        assert format_real(1.23456789, ndigits=None) == "1.23456789"

    def test_point_literal(self):
        assert point_literal([1, 2.5, float("nan")]) == "(1.,2.5,0.)"

    def test_ref_list_and_bool(self):
        assert ref_list([3, 7]) == "(#3,#7)"
        assert ref_list([]) == "()"
        assert bool_literal(True) == ".T."
        assert bool_literal(False) == ".F."

    def test_step_string_escapes(self):
        assert step_string("O'Brien") == "'O''Brien'"
        assert step_string("a\\b") == "'a\\\\b'"
        assert step_string("Étage") == "'\\X2\\00C9\\X0\\tage'"
        assert step_string(42) == "'42'"
