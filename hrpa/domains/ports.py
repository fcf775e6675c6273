from typing import Protocol, Sequence, Union


class DeviceChannel(Protocol):
    def run_command(self, command: str) -> str:
        ...

    def send_input(self, kind: str, args: Sequence[Union[int, str]]) -> str:
        ...
