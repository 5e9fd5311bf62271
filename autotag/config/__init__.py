r"""Configuration for autotag.

Key Components:
    - TaggerSettings: Per-repository .atc.yaml document
    - validate_settings: Rules checked before a configuration is used
    - AppSettings: Webhook server environment (ATC_*)
    - CISettings: CI job environment

Example:
    >>> from autotag.config.settings import TaggerSettings, validate_settings
    >>> settings = TaggerSettings.from_yaml_text("path: pom.xml\nbehavior: after\ntemplate: v{{.version}}")
    >>> validate_settings(settings, registry)
"""
