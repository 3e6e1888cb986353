"""Tests for design aggregation."""

from src.design_engine.aggregator import aggregate_designs, average_vectors, top_frequent
from src.schemas.design_schema import ExtractedDesign, SpacingSpec, TypographySpec


def _design(palette=(), margins=None, sizes=None, fonts=None, layout="title-and-bullets", quality=70, keywords=()):
    return ExtractedDesign(
        color_palette=list(palette),
        typography=TypographySpec(
            fonts=fonts if fonts is not None else ["Poppins", "Inter"],
            sizes=sizes if sizes is not None else [44, 32, 18, 16],
        ),
        spacing=SpacingSpec(margins=margins if margins is not None else [40, 40, 40, 40]),
        layout_pattern=layout,
        quality_score=quality,
        style_keywords=list(keywords),
    )


class TestHelpers:
    def test_top_frequent_ties_keep_first_seen(self):
        assert top_frequent(["b", "a", "a", "c", "b", "d"], 3) == ["b", "a", "c"]

    def test_average_vectors_uneven_lengths(self):
        assert average_vectors([[10, 20], [30]], [1, 2, 3]) == [20, 20]

    def test_average_vectors_round_half_up(self):
        assert average_vectors([[1], [2]], [0]) == [2]
        assert average_vectors([[2], [3]], [0]) == [3]

    def test_average_vectors_all_empty_uses_default(self):
        assert average_vectors([[], []], [48, 32, 18, 16]) == [48, 32, 18, 16]


class TestAggregateDesigns:
    def test_empty_input_default(self):
        spec = aggregate_designs([])
        assert spec.color_palette == []
        assert spec.typography.fonts == ["Montserrat", "Open Sans"]
        assert spec.typography.sizes == [48, 32, 18, 16]
        assert spec.layout_patterns == ["title-and-bullets"]
        assert spec.quality_score == 80
        assert spec.design_spec.background_color == "#FF8A00"
        assert spec.design_spec.text_color == "#FFFFFF"
        assert spec.design_spec.font_family == "Montserrat"
        assert spec.design_spec.font_size == 32
        assert spec.design_spec.custom_colors.secondary == "#2D3542"

    def test_frequency_ranking(self):
        spec = aggregate_designs([_design(["#AAA111", "#BBB222"]), _design(["#AAA111", "#CCC333"])])
        assert spec.color_palette[0] == "#AAA111"
        assert spec.color_palette == ["#AAA111", "#BBB222", "#CCC333"]

    def test_numeric_averaging(self):
        spec = aggregate_designs([_design(margins=[10, 20, 30, 40]), _design(margins=[30, 40, 50, 60])])
        assert spec.spacing.margins == [20, 30, 40, 50]

    def test_colors_normalized_before_counting(self):
        spec = aggregate_designs([_design(["#aaa111"]), _design(["AAA111"]), _design(["#BBB222"])])
        assert spec.color_palette == ["#AAA111", "#BBB222"]

    def test_top_k_limits(self):
        many = [f"#00000{i}" for i in range(10)]
        spec = aggregate_designs([_design(many, keywords=[f"k{i}" for i in range(12)])])
        assert len(spec.color_palette) == 8
        assert len(spec.style_keywords) == 10

    def test_design_spec_from_top_values(self):
        spec = aggregate_designs([
            _design(["#111111", "#222222", "#333333"], fonts=["Lato"], sizes=[40], layout="two-column"),
            _design(["#111111"], fonts=["Lato", "Roboto"], sizes=[50], layout="two-column"),
        ])
        ds = spec.design_spec
        assert ds.background_color == "#111111"
        assert ds.text_color == "#FFFFFF"
        assert ds.layout == "two-column"
        assert ds.font_family == "Lato"
        assert ds.font_size == 45
        assert ds.custom_colors.secondary == "#222222"
        assert ds.custom_colors.accent == "#333333"

    def test_missing_colors_fall_back(self):
        spec = aggregate_designs([_design()])
        assert spec.design_spec.background_color == "#FF8A00"
        assert spec.design_spec.custom_colors.accent == "#FFFFFF"

    def test_empty_fonts_fall_back(self):
        spec = aggregate_designs([_design(fonts=[])])
        assert spec.typography.fonts == ["Montserrat", "Open Sans"]

    def test_quality_mean(self):
        spec = aggregate_designs([_design(quality=81), _design(quality=90)])
        assert spec.quality_score == 86

    def test_pure(self):
        designs = [_design(["#AAA111"], quality=60), _design(["#BBB222"], quality=70)]
        assert aggregate_designs(designs) == aggregate_designs(designs)
