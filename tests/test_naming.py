"""Tests for output file naming."""

from datetime import datetime

from doctransform.generation import builtin_fields, render_file_name

NOW = datetime(2024, 5, 6, 7, 8, 9)


class TestBuiltinFields:
    """Tests for builtin_fields."""

    def test_fields(self):
        assert builtin_fields(3, NOW) == {
            "row": "3",
            "time": "20240506-070809",
            "date": "2024-05-06",
        }


class TestRenderFileName:
    """Tests for render_file_name."""

    def test_tokens_replaced(self):
        data = {"name": "Alice", **builtin_fields(1, NOW)}

        assert render_file_name("{row}_{name}", data, 1, NOW) == "1_Alice"

    def test_case_insensitive(self):
        assert render_file_name("{NAME}-{Name}", {"name": "Bo"}, 1, NOW) == "Bo-Bo"

    def test_invalid_characters(self):
        name = render_file_name("{name}", {"name": 'a/b:c*d?"e'}, 1, NOW)

        assert name == "a_b_c_d__e"

    def test_unknown_tokens_stay(self):
        assert render_file_name("{missing}", {"name": "x"}, 1, NOW) == "{missing}"

    def test_blank_falls_back(self):
        assert render_file_name("{name}", {"name": ""}, 4, NOW) == "Document_4_20240506-070809"
        assert render_file_name("", {}, 2, NOW) == "Document_2_20240506-070809"

    def test_only_underscores_falls_back(self):
        name = render_file_name("{name}", {"name": "///"}, 1, NOW)

        assert name == "Document_1_20240506-070809"
