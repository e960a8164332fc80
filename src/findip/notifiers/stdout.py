"""Console notifier."""

import click

from findip.errors import FindIpError
from findip.ip_query import IpAddress


class StdoutNotifier:
    """Prints the IP to stdout and errors to stderr."""

    async def notify_success(self, ip: IpAddress) -> bool:
        click.echo(str(ip))
        return True

    async def notify_error(self, error: FindIpError) -> None:
        click.echo(f"Error: {error}", err=True)
