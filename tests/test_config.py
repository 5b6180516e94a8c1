import pytest
import yaml

from config_loader import generate_template_config, load_config, save_config, validate_config
from config_types import DEFAULT_CONFIG, CoulombConfig
from errors import CoulombDomainError


def test_defaults():
    config = CoulombConfig()
    assert config == DEFAULT_CONFIG
    assert config.accuracy == 2.0 ** -49
    assert config.series_max == 250
    assert config.effective_integration_accuracy == 2.5e-13
    assert config.fraction_max(10.2) == 250 + 44
    assert config.fraction_max(1.0, -999.5) == 250 + 4 + 2000


def test_params_round_trip():
    config = CoulombConfig(accuracy=1e-10, series_max=400, ode_method="dop853", initial_step=0.1)
    assert CoulombConfig.from_params(config.to_dict()) == config


@pytest.mark.parametrize(
    "kwargs",
    [
        {"accuracy": 1e-20},
        {"accuracy": 1.0},
        {"accuracy": "1e-10"},
        {"series_max": 5},
        {"series_threshold": -1.0},
        {"asymptotic_offset": 0.0},
        {"initial_step": 0.0},
        {"max_evaluations": 10},
        {"ode_method": "rk4"},
    ],
)
def test_invalid_settings_are_rejected(kwargs):
    with pytest.raises(CoulombDomainError):
        CoulombConfig(**kwargs)


def test_yaml_round_trip(tmp_path):
    config = CoulombConfig(accuracy=1e-12, asymptotic_offset=40.0, max_evaluations=5000)
    path = tmp_path / "coulomb.yaml"
    save_config(config, path)
    assert load_config(path) == config


def test_template_loads_to_defaults(tmp_path):
    path = tmp_path / "sub" / "template.yaml"
    generate_template_config(path)
    assert load_config(path) == CoulombConfig()


def test_fast_template(tmp_path):
    path = tmp_path / "fast.yaml"
    generate_template_config(path, profile="fast")
    config = load_config(path)
    assert config.accuracy == 1e-10
    assert config.integration_accuracy == 1e-10


def test_partial_file_uses_defaults(tmp_path):
    path = tmp_path / "partial.yaml"
    path.write_text("coulomb:\n  accuracy: 1.0e-8\n", encoding="utf-8")
    config = load_config(path)
    assert config.accuracy == 1e-8
    assert config.ode_method == "bulirsch-stoer"


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ValueError, match="empty"):
        load_config(path)


def test_unknown_key_is_reported(tmp_path):
    path = tmp_path / "typo.yaml"
    path.write_text(yaml.safe_dump({"coulomb": {"acuracy": 1e-10}}), encoding="utf-8")
    with pytest.raises(ValueError, match="coulomb.acuracy"):
        load_config(path)


def test_validate_config_collects_every_problem():
    errors = validate_config({
        "coulomb": {"accuracy": 1e-30, "series_max": 3},
        "integration": {"method": "euler"},
    })
    assert len(errors) == 3
    assert any("series_max" in e for e in errors)
    assert any("ode_method" in e for e in errors)


def test_validate_config_rejects_unknown_section_and_non_mapping():
    assert validate_config({"plot": {}})
    assert validate_config(["coulomb"])
    assert validate_config({"coulomb": 3})
    assert validate_config({"coulomb": None}) == []
