from infra.hdc.client import (
    HdcClient,
    abilities_command,
    hidumper_command,
    input_command,
    parse_screen_size,
    screen_info_command,
    start_ability_command,
    ui_tree_command,
    windows_command,
)

__all__ = [
    "HdcClient",
    "abilities_command",
    "hidumper_command",
    "input_command",
    "parse_screen_size",
    "screen_info_command",
    "start_ability_command",
    "ui_tree_command",
    "windows_command",
]
