"""Tests for parameter snapshots and YAML files."""

import dataclasses

import pytest

from signcad.errors import ParameterError
from signcad.params import (LED_CHANNELS, LineSpec, Parameters, dump_parameters, led_channel,
                            load_parameters)


class TestDefaults:

    def test_defaults(self):
        p = Parameters()
        assert p.lines == (LineSpec('1234', 'center'),)
        assert p.height_mm == 80
        assert p.depth_mm == 12
        assert p.padding_mm == 8
        assert p.wall_thick_mm == 3
        assert p.mount_type == 'french_cleat'
        assert p.backplate_shape == 'rectangle'
        assert p.housing and p.letter_mounting
        assert not p.weather_seal
        assert p.reflector == 'none'

    def test_unit_scale(self):
        assert Parameters(scale_factor=2).unit_scale == pytest.approx(0.002)

    def test_standalone(self):
        assert not Parameters().standalone
        assert Parameters(housing=False).standalone
        assert Parameters(backplate_shape='none').standalone

    def test_led_channels(self):
        assert LED_CHANNELS['strip_5v'] == (12, 4)
        assert led_channel('strip_12v') == (10, 3)
        assert led_channel('cob') == (8, 3)
        assert led_channel('neon') == (12, 4)


class TestValidation:

    def test_bad_alignment(self):
        with pytest.raises(ParameterError):
            LineSpec('12', 'justify')
        assert issubclass(ParameterError, ValueError)

    @pytest.mark.parametrize('field,value', [
        ('mount_type', 'glue'),
        ('backplate_shape', 'star'),
        ('led_type', 'neon'),
        ('reflector', 'mirror'),
        ('height_mm', 0),
        ('depth_mm', -1),
        ('scale_factor', 0),
        ('padding_mm', -0.1),
        ('line_spacing_mm', -1),
    ])
    def test_rejected(self, field, value):
        with pytest.raises(ParameterError):
            Parameters(**{field: value})

    def test_frozen(self):
        p = Parameters()
        with pytest.raises(dataclasses.FrozenInstanceError):
            p.height_mm = 10

    def test_replace(self):
        p = Parameters()
        q = p.replace(height_mm=120)
        assert q.height_mm == 120
        assert p.height_mm == 80
        with pytest.raises(ParameterError):
            p.replace(mount_type='nails')


class TestMappings:

    def test_from_dict_strings(self):
        p = Parameters.from_dict({'lines': ['12', 'MAIN ST'], 'mount_type': 'keyhole'})
        assert p.lines == (LineSpec('12'), LineSpec('MAIN ST'))
        assert p.mount_type == 'keyhole'

    def test_from_dict_mappings(self):
        p = Parameters.from_dict({'lines': [{'text': '7', 'align': 'left'}]})
        assert p.lines == (LineSpec('7', 'left'),)

    def test_from_dict_single_string(self):
        assert Parameters.from_dict({'lines': '42'}).lines == (LineSpec('42'),)

    def test_unknown_keys(self):
        with pytest.raises(ParameterError):
            Parameters.from_dict({'colour': 'red'})
        with pytest.raises(ParameterError):
            Parameters.from_dict({'lines': [{'text': '1', 'size': 3}]})

    def test_round_trip(self):
        p = Parameters(lines=(LineSpec('9', 'right'),), housing=False, corner_radius_mm=4)
        assert Parameters.from_dict(p.to_dict()) == p

    def test_yaml_file(self, tmp_path):
        path = tmp_path / 'sign.yaml'
        p = Parameters(lines=(LineSpec('221B'), LineSpec('BAKER ST', 'left')),
                       backplate_shape='arch')
        with open(path, 'w') as f:
            dump_parameters(p, f)
        assert load_parameters(path) == p

    def test_yaml_partial_file(self, tmp_path):
        path = tmp_path / 'sign.yaml'
        path.write_text("lines:\n  - '12'\nheight_mm: 100\n")
        p = load_parameters(path)
        assert p.height_mm == 100
        assert p.depth_mm == 12

    def test_yaml_not_a_mapping(self, tmp_path):
        path = tmp_path / 'sign.yaml'
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ParameterError):
            load_parameters(path)

    def test_dump_returns_text(self):
        text = dump_parameters(Parameters())
        assert 'height_mm: 80.0' in text
        assert text.index('lines') < text.index('height_mm')
