"""
Command-line interface for the Wi-Fi router controller
"""
import click
from .config import load_config, collect_config, default_paths, is_configured, DEFAULT_PATHS
from .readiness import DEFAULT_TIMEOUT, DEFAULT_INTERVAL, DEFAULT_BACKOFF, DEFAULT_MAX_INTERVAL
from .router import configure_interactive, start_router, stop_router, show_status
from .utils import ensure_root, error_exit, log, warn, EXIT_USAGE

ACTIONS = ('start', 'stop', 'status', 'interactive')
USAGE = f"Usage: router.py {{{'|'.join(ACTIONS)}}}"


class RouterGroup(click.Group):
    """Checks privileges before dispatching and rejects unknown actions with status 1."""

    def invoke(self, ctx):
        ensure_root()
        return super().invoke(ctx)

    def resolve_command(self, ctx, args):
        if args and self.get_command(ctx, args[0]) is None:
            error_exit(USAGE, EXIT_USAGE)
        return super().resolve_command(ctx, args)


@click.group(cls=RouterGroup, invoke_without_command=True)
@click.option('--config', 'config_path', default=DEFAULT_PATHS['ROUTER_CONF'],
              show_default=True, help='Path to the saved router parameters')
@click.pass_context
def cli(ctx, config_path):
    "Turn a Wi-Fi interface into an access point routed through an internet interface"
    paths = default_paths(ROUTER_CONF=config_path)
    ctx.obj = {
        'paths': paths,
        'config': load_config(paths['ROUTER_CONF']),
    }
    if ctx.invoked_subcommand is None:
        ctx.invoke(interactive)


@cli.command()
@click.pass_obj
def interactive(obj):
    "Ask for the router parameters and save them"
    configure_interactive(obj['config'], obj['paths'])
    log("Configuration saved. To start the router run: sudo router.py start")


@cli.command()
@click.option('--ap-timeout', type=click.FloatRange(min=0), default=DEFAULT_TIMEOUT,
              show_default=True, help='Seconds to wait for the interface to enter AP mode')
@click.option('--ap-interval', type=click.FloatRange(min=0, min_open=True), default=DEFAULT_INTERVAL,
              show_default=True, help='Seconds between the first AP mode checks')
@click.option('--ap-backoff', type=click.FloatRange(min=1), default=DEFAULT_BACKOFF,
              show_default=True, help='Factor applied to the delay after each failed check')
@click.option('--ap-max-interval', type=click.FloatRange(min=0, min_open=True), default=DEFAULT_MAX_INTERVAL,
              show_default=True, help='Upper bound for the delay once backoff grows it')
@click.pass_obj
def start(obj, ap_timeout, ap_interval, ap_backoff, ap_max_interval):
    "Bring up the access point, DHCP server and NAT"
    config = obj['config']
    if not is_configured(config):
        warn("No configuration found. Switching to interactive mode.")
        config = collect_config(config)

    ap_wait = {'timeout': ap_timeout, 'interval': ap_interval, 'backoff': ap_backoff,
               'max_interval': ap_max_interval}
    start_router(config, obj['paths'], ap_wait=ap_wait)


@cli.command()
@click.option('--reset-forward-policy', is_flag=True,
              help='Set the FORWARD chain policy back to DROP')
@click.pass_obj
def stop(obj, reset_forward_policy):
    "Stop the daemons and remove the address and NAT rules"
    stop_router(obj['config'], reset_policy=reset_forward_policy)


@cli.command()
@click.pass_obj
def status(obj):
    "Show interfaces, daemons and NAT rules"
    show_status(obj['config'])


if __name__ == '__main__':
    cli()
