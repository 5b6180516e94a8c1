# config_loader.py
"""
Configuration File Loader for the Coulomb Wave Function Engine
==============================================================

Provides YAML-based loading and validation of CoulombConfig, so accuracy
and regime settings can be kept with a calculation instead of in code.

Usage
-----
```python
from config_loader import load_config
from coulomb import coulomb_fg

config = load_config("coulomb.yaml")
pair = coulomb_fg(3, 1.5, 10.0, config=config)
```

Configuration Format
--------------------
```yaml
coulomb:
  accuracy: 1.0e-14
  series_max: 250
  series_threshold: 16.0
  asymptotic_offset: 32.0
integration:
  method: bulirsch-stoer
  accuracy: 2.5e-13
  initial_step: 0.25
  max_evaluations: 100000
```
Every key is optional; missing keys take the CoulombConfig defaults.
Run ``python config_loader.py --generate PATH`` for a commented template.
"""

from __future__ import annotations
import yaml
from pathlib import Path
from typing import List, Dict, Any, Union

from config_types import CoulombConfig, config_problems, params_to_fields
from constants import MAX_ACCURACY
from logging_config import get_logger

logger = get_logger(__name__)

_SECTION_KEYS: Dict[str, tuple] = {
    'coulomb': ('accuracy', 'series_max', 'series_threshold', 'asymptotic_offset'),
    'integration': ('method', 'accuracy', 'initial_step', 'max_evaluations'),
}


# =============================================================================
# CONFIG LOADING AND VALIDATION
# =============================================================================

def validate_config(raw_data: Dict[str, Any]) -> List[str]:
    """
    Validate a parsed configuration mapping and return a list of errors.

    Unknown sections and keys are reported as well as invalid values, so a
    misspelled setting is never silently replaced by its default.

    Returns
    -------
    List[str]
        List of validation error messages. Empty if valid.
    """
    if not isinstance(raw_data, dict):
        return [f"Configuration must be a mapping, got {type(raw_data).__name__}"]

    errors = []
    for section, content in raw_data.items():
        if section not in _SECTION_KEYS:
            errors.append(f"Unknown section '{section}'. Expected one of {sorted(_SECTION_KEYS)}")
            continue
        if content is None:
            continue
        if not isinstance(content, dict):
            errors.append(f"Section '{section}' must be a mapping, got {type(content).__name__}")
            continue
        for key in content:
            if key not in _SECTION_KEYS[section]:
                errors.append(f"Unknown key '{section}.{key}'")

    if errors:
        return errors
    return config_problems(params_to_fields(raw_data))


def load_config(path: Union[str, Path]) -> CoulombConfig:
    """
    Load and validate a YAML configuration file.

    Parameters
    ----------
    path : str or Path
        Path to the YAML configuration file.

    Returns
    -------
    CoulombConfig
        Validated configuration object.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    ValueError
        If the configuration is empty or invalid.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from: %s", path)

    with open(path, 'r', encoding='utf-8') as f:
        try:
            raw_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Configuration file is not valid YAML: {path}\n{e}") from e

    if raw_data is None:
        raise ValueError(f"Configuration file is empty: {path}")

    errors = validate_config(raw_data)
    if errors:
        raise ValueError("Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors))

    config = CoulombConfig.from_params(raw_data)
    logger.info("Configuration loaded successfully: accuracy=%g, ode_method='%s'",
                config.accuracy, config.ode_method)
    return config


def save_config(config: CoulombConfig, output_path: Union[str, Path]) -> None:
    """Write `config` as YAML in the format read by load_config."""
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        yaml.safe_dump(config.to_dict(), f, sort_keys=False)

    logger.info("Configuration saved to: %s", path)


def generate_template_config(output_path: Union[str, Path],
                             profile: str = "full") -> None:
    """
    Generate a template configuration file.

    Parameters
    ----------
    output_path : str or Path
        Where to save the template.
    profile : str
        "full" (double precision) or "fast" (1e-10, cheaper series and
        continued fractions).
    """
    if profile not in ("full", "fast"):
        raise ValueError(f"Unknown template profile '{profile}'. Must be 'full' or 'fast'.")
    # YAML 1.1 only reads exponent floats that contain a decimal point
    accuracy = repr(MAX_ACCURACY) if profile == "full" else "1.0e-10"
    integration_accuracy = "2.5e-13" if profile == "full" else "1.0e-10"

    template = f'''# Coulomb Wave Function Configuration
# Generated template ({profile} accuracy profile)

coulomb:
  accuracy: {accuracy}         # relative target, 2^-49 <= accuracy < 1
  series_max: 250                   # series iteration ceiling
  series_threshold: 16.0            # origin series used for rho < sqrt(X)(1 + sqrt(L)/2)
  asymptotic_offset: 32.0           # asymptotic for rho > offset + (L^2 + eta^2)/2

integration:
  method: "bulirsch-stoer"          # "bulirsch-stoer" or "dop853"
  accuracy: {integration_accuracy}                    # floor for the ODE fallback
  initial_step: 0.25
  max_evaluations: 100000
'''

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, 'w', encoding='utf-8') as f:
        f.write(template)

    logger.info("Template configuration saved to: %s", path)


# =============================================================================
# CLI UTILITIES
# =============================================================================

if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Coulomb Configuration File Utilities")
    parser.add_argument("--generate", "-g", type=str, metavar="PATH",
                        help="Generate template config at PATH")
    parser.add_argument("--profile", "-p", choices=["full", "fast"],
                        default="full", help="Template accuracy profile")
    parser.add_argument("--validate", "-v", type=str, metavar="PATH",
                        help="Validate config file at PATH")

    args = parser.parse_args()

    if args.generate:
        generate_template_config(args.generate, args.profile)
        print(f"Template saved to: {args.generate}")
    elif args.validate:
        try:
            config = load_config(args.validate)
            print(f"✓ Configuration is valid: {args.validate}")
            print(f"  Accuracy: {config.accuracy:g}")
            print(f"  ODE method: {config.ode_method}")
        except (FileNotFoundError, ValueError) as e:
            print(f"✗ Validation failed: {e}")
    else:
        parser.print_help()
