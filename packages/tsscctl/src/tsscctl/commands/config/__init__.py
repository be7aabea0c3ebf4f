from .command import configure_config_parser, run_config_command

__all__ = ["configure_config_parser", "run_config_command"]
