# tests/core/generate/test_input_config.py
"""
Testes das entradas de geração (`inputs[]`).

Os testes asseguram que:
- exatamente um campo de localização é exigido
- cada tipo aceita apenas as suas opções secundárias
- `commit` e `tag` são mutuamente exclusivos e preservados separadamente
- localizações vazias são rejeitadas com o rótulo do tipo
"""

import pytest

from bufconfig.core.errors import InternalConfigError, InvalidConfigError, MalformedConfigError
from bufconfig.generate.input_config import (
    InputConfigType,
    input_config_from_wire,
    input_config_to_wire,
    new_input_config,
)


def test_git_repo_with_options():
    raw = {"git_repo": "https://github.com/acme/weather.git", "tag": "v1.0.0", "depth": 30, "subdir": "proto"}
    config = input_config_from_wire(raw, where="inputs[0]")
    assert config.input_config_type == InputConfigType.GIT_REPO
    assert config.tag == "v1.0.0"
    assert config.commit is None
    assert config.set_options() == ["subdir", "tag", "depth"]
    assert input_config_to_wire(config) == {
        "git_repo": "https://github.com/acme/weather.git",
        "subdir": "proto",
        "tag": "v1.0.0",
        "depth": 30,
    }


def test_orthogonal_filters_are_always_allowed():
    config = input_config_from_wire(
        {
            "module": "buf.build/acme/weather",
            "types": ["acme.weather.v1.Forecast"],
            "exclude_types": ["acme.weather.v1.Internal"],
            "paths": ["acme/weather/v1"],
            "exclude_paths": ["acme/weather/v1/internal"],
        },
        where="inputs[0]",
    )
    assert config.include_types == ("acme.weather.v1.Forecast",)
    assert config.exclude_types == ("acme.weather.v1.Internal",)
    wire = input_config_to_wire(config)
    assert list(wire) == ["module", "types", "exclude_types", "paths", "exclude_paths"]


def test_location_cardinality():
    with pytest.raises(InvalidConfigError, match="must specify one of"):
        input_config_from_wire({"types": ["a.B"]}, where="inputs[0]")
    with pytest.raises(InvalidConfigError, match="exactly one of"):
        input_config_from_wire({"directory": "proto", "module": "buf.build/acme/x"}, where="inputs[0]")


def test_null_location_keys_are_not_set():
    config = input_config_from_wire({"module": None, "directory": "proto"}, where="inputs[0]")
    assert config.input_config_type == InputConfigType.DIRECTORY
    assert input_config_to_wire(config) == {"directory": "proto"}
    with pytest.raises(InvalidConfigError, match="must specify one of"):
        input_config_from_wire({"module": None}, where="inputs[0]")


def test_commit_and_tag_are_exclusive():
    with pytest.raises(InvalidConfigError, match="commit and tag options cannot be used at the same time"):
        input_config_from_wire(
            {"git_repo": "https://github.com/acme/x.git", "commit": "abc", "tag": "v1"},
            where="inputs[0]",
        )


@pytest.mark.parametrize(
    "raw,message",
    [
        ({"directory": "proto", "branch": "main"}, "option branch is not allowed for InputConfigType directory"),
        ({"zip_archive": "a.zip", "compression": "gzip"}, "option compression is not allowed"),
        ({"proto_file": "a.proto", "depth": 1}, "option depth is not allowed"),
    ],
)
def test_disallowed_options(raw, message):
    with pytest.raises(InvalidConfigError, match=message):
        input_config_from_wire(raw, where="inputs[0]")


def test_empty_location():
    with pytest.raises(InvalidConfigError, match="empty location for git repository"):
        input_config_from_wire({"git_repo": ""}, where="inputs[0]")
    with pytest.raises(InvalidConfigError, match="empty location for JSON image"):
        new_input_config(InputConfigType.JSON_IMAGE, "")


def test_wire_errors():
    with pytest.raises(MalformedConfigError, match="field 'url' not found in inputs"):
        input_config_from_wire({"url": "x"}, where="inputs[0]")
    with pytest.raises(MalformedConfigError, match=r"inputs\[0\].depth must be an integer"):
        input_config_from_wire({"git_repo": "x", "depth": "deep"}, where="inputs[0]")
    with pytest.raises(InternalConfigError, match="unknown input config option"):
        new_input_config(InputConfigType.DIRECTORY, "proto", url="x")
