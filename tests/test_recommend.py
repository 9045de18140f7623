"""Tests for the text and style advice rules."""

import pytest

from signcad.params import LineSpec, Parameters
from signcad.recommend import STYLE_ADVICE, recommendations, text_traits


def _params(*lines, **kw):
    return Parameters(lines=tuple(LineSpec(t) for t in lines), **kw)


class TestTextTraits:

    def test_numbers_across_lines(self):
        t = text_traits(_params('12', '34'))
        assert t.numbers_only
        assert not t.is_name
        assert t.words == 2

    def test_short_name(self):
        t = text_traits(_params('Smith'))
        assert t.is_name and t.short and not t.long

    def test_long_phrase_is_not_a_name(self):
        t = text_traits(_params('Welcome to our happy home'))
        assert t.long
        assert not t.is_name
        assert t.words == 5

    def test_symbols_only(self):
        t = text_traits(_params('#-#'))
        assert not t.numbers_only
        assert not t.is_name
        assert t.short

    def test_empty_text(self):
        t = text_traits(_params(''))
        assert not t.numbers_only
        assert t.words == 0
        assert t.short


class TestRecommendations:

    def test_house_numbers(self):
        rec = recommendations(_params('1234'))
        assert rec.font.startswith('House numbers')
        assert rec.size.startswith('Street-visible')

    @pytest.mark.parametrize('text, prefix', [
        ('Smith', 'Short name'),
        ('The Johnsons', 'Longer name'),
        ('Welcome to our happy home', 'Long text'),
        ('#-#', 'Short text'),
        ('Flat 2 B 4', 'General text'),
    ])
    def test_font_rules(self, text, prefix):
        assert recommendations(_params(text)).font.startswith(prefix)

    def test_names_get_sign_sizes(self):
        assert recommendations(_params('Smith')).size.startswith('Names and signs')

    @pytest.mark.parametrize('shape', sorted(STYLE_ADVICE))
    def test_style_follows_shape(self, shape):
        assert recommendations(_params('1', backplate_shape=shape)).style == STYLE_ADVICE[shape]

    def test_material_follows_housing(self):
        assert recommendations(_params('1')).material.startswith('Outdoors')
        assert recommendations(_params('1', housing=False)).material.startswith('Standalone')

    def test_as_dict_keys(self):
        assert list(recommendations(_params('1')).as_dict()) == [
            'font', 'size', 'style', 'material']
