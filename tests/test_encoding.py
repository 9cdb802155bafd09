"""Tests for encoding-variant suffixes and encoding lookup."""

import pytest

from amdgpu_isa.encoding import (
    EncodingVariant,
    describe_encoding,
    encoding_summary,
    find_matching_encoding,
    split_encoding_variant,
)


class TestSplitEncodingVariant:
    """Suffix splitting is case-insensitive and longest-first."""

    @pytest.mark.parametrize("token,base,variant", [
        ("v_add_f32_e32", "v_add_f32", EncodingVariant.E32),
        ("v_add_f32_e64", "v_add_f32", EncodingVariant.E64),
        ("v_mov_b32_dpp", "v_mov_b32", EncodingVariant.DPP),
        ("v_mov_b32_sdwa", "v_mov_b32", EncodingVariant.SDWA),
        ("v_add_f32_e64_dpp", "v_add_f32", EncodingVariant.E64_DPP),
        ("s_endpgm", "s_endpgm", EncodingVariant.NATIVE),
    ])
    def test_split(self, token, base, variant):
        assert split_encoding_variant(token) == (base, variant)

    def test_combined_suffix_not_split_as_dpp(self):
        split = split_encoding_variant("v_fma_f32_e64_dpp")
        assert split.variant is EncodingVariant.E64_DPP
        assert split.base == "v_fma_f32"

    def test_base_keeps_casing(self):
        split = split_encoding_variant("V_MOV_B32_DPP")
        assert split.base == "V_MOV_B32"
        assert split.variant is EncodingVariant.DPP

    def test_suffix_only_inside_name_ignored(self):
        assert split_encoding_variant("v_e32_thing").variant is EncodingVariant.NATIVE


class TestFindMatchingEncoding:
    """Variants pick the right concrete encoding."""

    def test_native_skips_literal(self):
        available = ["ENC_VOP2_INST_LITERAL", "ENC_VOP2", "VOP2_VOP_DPP16"]
        assert find_matching_encoding(available, EncodingVariant.NATIVE) == "ENC_VOP2"

    def test_e32(self):
        assert find_matching_encoding(["ENC_VOP3", "ENC_VOPC"], EncodingVariant.E32) == "ENC_VOPC"

    def test_e64(self):
        assert find_matching_encoding(["ENC_VOP2", "ENC_VOP3"], EncodingVariant.E64) == "ENC_VOP3"
        assert find_matching_encoding(["ENC_VOP2", "ENC_VOP3P"], EncodingVariant.E64) is None

    def test_dpp_prefers_dpp16(self):
        available = ["VOP1_VOP_DPP8", "VOP1_VOP_DPP16"]
        assert find_matching_encoding(available, EncodingVariant.DPP) == "VOP1_VOP_DPP16"

    def test_dpp_falls_back_to_any_dpp(self):
        assert find_matching_encoding(["ENC_VOP1", "VOP1_VOP_DPP8"], EncodingVariant.DPP) == "VOP1_VOP_DPP8"

    def test_sdwa(self):
        assert find_matching_encoding(["ENC_VOP1", "VOP1_VOP_SDWA"], EncodingVariant.SDWA) == "VOP1_VOP_SDWA"

    def test_e64_dpp_requires_vop3(self):
        available = ["VOP1_VOP_DPP16", "VOP3_VOP_DPP8", "VOP3_VOP_DPP16"]
        assert find_matching_encoding(available, EncodingVariant.E64_DPP) == "VOP3_VOP_DPP16"
        assert find_matching_encoding(["VOP1_VOP_DPP16"], EncodingVariant.E64_DPP) is None

    def test_nothing_available(self):
        for variant in EncodingVariant:
            assert find_matching_encoding([], variant) is None


class TestDescriptions:

    def test_known_encoding(self):
        assert describe_encoding("ENC_VOP3") == (
            "VOP3 (64-bit): Extended vector ALU with modifiers and additional operand flexibility"
        )

    def test_unknown_encoding(self):
        assert describe_encoding("ENC_FUTURE") is None

    def test_summary_uses_description(self):
        summary = encoding_summary(["ENC_VOP2", "ENC_VOP3"], EncodingVariant.E32)
        assert summary == "VOP2 (32-bit): Vector ALU operation with two sources"

    def test_summary_falls_back_to_raw_name(self):
        assert encoding_summary(["ENC_FUTURE"], EncodingVariant.NATIVE) == "ENC_FUTURE"

    def test_summary_falls_back_to_variant_label(self):
        assert encoding_summary(["ENC_VOP2"], EncodingVariant.E64) == "VOP3 (64-bit)"
