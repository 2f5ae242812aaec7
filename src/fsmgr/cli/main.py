"""
fsmgr CLI Main Entry Point.

Format, resize and inspect partitions from the command line.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click
import humanize
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from fsmgr import __version__
from fsmgr.core.config import FsMgrConfig, load_config
from fsmgr.core.errors import DeviceError
from fsmgr.core.fstab import find_entry, load_fstab
from fsmgr.core.logging import setup_logging
from fsmgr.core.models import FsMgrFlag, PartitionSpec
from fsmgr.core.properties import PropertyStore
from fsmgr.fs.args import ArgumentBuilder
from fsmgr.fs.format import do_format
from fsmgr.fs.resize import do_resize
from fsmgr.fs.superblock import read_signature
from fsmgr.platform.base import ProcessRunner
from fsmgr.platform.blockdev import probe_size
from fsmgr.platform.process import DryRunRunner, SubprocessRunner

console = Console()

FS_TYPES = ["ext4", "f2fs", "vfat"]


def exit_status(rc: int) -> int:
    """Map an fsmgr status to a process exit status."""
    if rc == 0:
        return 0
    if 0 < rc < 256:
        return rc
    return 1


def parse_props(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> list[tuple[str, str]]:
    """Split repeated KEY=VALUE options."""
    props = []
    for value in values:
        name, sep, prop_value = value.partition("=")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected KEY=VALUE, got '{value}'")
        props.append((name.strip(), prop_value.strip()))
    return props


def resolve_spec(
    target: str,
    fstab: Path | None,
    fs_type: str | None,
    mount_point: str | None,
    length: int,
    flags: set[FsMgrFlag],
) -> PartitionSpec:
    """Build the partition spec from an fstab entry or from options."""
    if fstab is not None:
        entry = find_entry(load_fstab(fstab), target)
        if entry is None:
            raise click.UsageError(f"No fstab entry for mount point {target}")
        return entry

    if fs_type is None:
        raise click.UsageError("--type is required unless --fstab is given")

    try:
        return PartitionSpec(
            block_device=target,
            mount_point=mount_point or "",
            fs_type=fs_type,
            length=length,
            flags=frozenset(flags),
        )
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--length") from None


def show_plan(title: str, runner: ProcessRunner) -> None:
    if not runner.invocations:
        console.print(Panel("[green]Nothing to run[/green]", title=title))
        return
    commands = "\n".join(str(invocation) for invocation in runner.invocations)
    console.print(Panel(f"[yellow]DRY RUN[/yellow]\n\n{commands}", title=title))


def report_result(
    ctx: click.Context, runner: ProcessRunner, rc: int, title: str, success: str, failure: str
) -> None:
    """Print the outcome of a format or resize and exit with its status."""
    dry_run = isinstance(runner, DryRunRunner)

    if ctx.obj.get("json_output", False):
        data = {
            "exit_code": rc,
            "dry_run": dry_run,
            "invocations": [invocation.argv for invocation in runner.invocations],
        }
        click.echo(json.dumps(data, indent=2))
    elif dry_run and rc == 0:
        show_plan(title, runner)
    elif rc == 0:
        console.print(f"[green]{success}[/green]")
    else:
        console.print(f"[red]{failure} ({rc})[/red]")

    sys.exit(exit_status(rc))


@click.group()
@click.version_option(version=__version__, prog_name="fsmgr")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
@click.pass_context
def cli(ctx: click.Context, config: Path | None, verbose: bool, json_output: bool) -> None:
    """
    fsmgr - Partition filesystem format and resize tool.

    Creates ext4, f2fs and vfat filesystems with mke2fs, make_f2fs and
    newfs_msdos, and grows f2fs with resize.f2fs.
    """
    ctx.ensure_object(dict)

    cfg = FsMgrConfig.load(config) if config else load_config()
    if verbose:
        cfg.logging.level = "DEBUG"
    setup_logging(cfg.logging)

    ctx.obj["config"] = cfg
    ctx.obj["json_output"] = json_output


@cli.command("format")
@click.argument("target")
@click.option("--type", "-t", "fs_type", type=click.Choice(FS_TYPES), help="Filesystem type")
@click.option("--mount-point", "-m", help="Mount point the partition is used at")
@click.option("--length", "-l", type=int, default=0, show_default=True,
              help="Filesystem size in bytes (0 = whole device)")
@click.option("--compress", is_flag=True, help="Enable f2fs compression")
@click.option("--ext-meta-csum", is_flag=True, help="Enable ext4 metadata checksums")
@click.option("--crypt-footer", is_flag=True, help="Reserve space for a crypt footer")
@click.option("--prop", "props", multiple=True, callback=parse_props,
              help="Property override, KEY=VALUE")
@click.option("--fstab", type=click.Path(exists=True, path_type=Path),
              help="Read the partition from this fstab; TARGET is its mount point")
@click.option("--dry-run", is_flag=True, help="Show what would be done")
@click.pass_context
def format_partition(
    ctx: click.Context,
    target: str,
    fs_type: str | None,
    mount_point: str | None,
    length: int,
    compress: bool,
    ext_meta_csum: bool,
    crypt_footer: bool,
    props: list[tuple[str, str]],
    fstab: Path | None,
    dry_run: bool,
) -> None:
    """Format a partition."""
    config: FsMgrConfig = ctx.obj["config"]

    flags: set[FsMgrFlag] = set()
    if compress:
        flags.add(FsMgrFlag.COMPRESS)
    if ext_meta_csum:
        flags.add(FsMgrFlag.EXT_META_CSUM)

    spec = resolve_spec(target, fstab, fs_type, mount_point, length, flags)

    properties = config.load_properties()
    properties.update(PropertyStore(dict(props)))

    runner: ProcessRunner = DryRunRunner() if dry_run else SubprocessRunner()
    rc = do_format(
        spec,
        crypt_footer,
        properties=properties,
        runner=runner,
        builder=ArgumentBuilder(config.tools),
    )

    report_result(
        ctx,
        runner,
        rc,
        title="Format Plan",
        success=f"Formatted {spec.block_device} as {spec.fs_type}",
        failure=f"Format of {spec.block_device} failed",
    )


@cli.command("resize")
@click.argument("target")
@click.option("--type", "-t", "fs_type", type=click.Choice(FS_TYPES), default="f2fs",
              show_default=True, help="Filesystem type")
@click.option("--length", "-l", type=int, default=0, show_default=True,
              help="Target size in bytes (0 = whole device)")
@click.option("--crypt-footer", is_flag=True, help="Reserve space for a crypt footer")
@click.option("--fstab", type=click.Path(exists=True, path_type=Path),
              help="Read the partition from this fstab; TARGET is its mount point")
@click.option("--dry-run", is_flag=True, help="Show what would be done")
@click.pass_context
def resize_partition(
    ctx: click.Context,
    target: str,
    fs_type: str,
    length: int,
    crypt_footer: bool,
    fstab: Path | None,
    dry_run: bool,
) -> None:
    """Grow the filesystem on a partition to fill it."""
    config: FsMgrConfig = ctx.obj["config"]
    spec = resolve_spec(target, fstab, fs_type, None, length, set())

    runner: ProcessRunner = DryRunRunner() if dry_run else SubprocessRunner()
    rc = do_resize(spec, crypt_footer, runner=runner, builder=ArgumentBuilder(config.tools))

    report_result(
        ctx,
        runner,
        rc,
        title="Resize Plan",
        success=f"Resize of {spec.block_device} complete",
        failure=f"Resize of {spec.block_device} failed",
    )


@cli.command("inspect")
@click.argument("device")
@click.pass_context
def inspect_device(ctx: click.Context, device: str) -> None:
    """Show device size and f2fs superblock details."""
    json_output = ctx.obj.get("json_output", False)

    try:
        size = probe_size(device)
    except DeviceError as e:
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)

    header = read_signature(device)

    if json_output:
        data = {
            "device": device,
            "size_bytes": size,
            "f2fs": header.to_dict() if header else None,
        }
        click.echo(json.dumps(data, indent=2))
        return

    table = Table(title=f"Device {device}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Size", f"{humanize.naturalsize(size, binary=True)} ({size} bytes)")

    if header is None:
        table.add_row("F2FS", "[yellow]No superblock found[/yellow]")
    else:
        table.add_row("F2FS version", header.version)
        table.add_row("Block count", str(header.block_count))
        table.add_row("Filesystem size", humanize.naturalsize(header.byte_size, binary=True))
        table.add_row("Checksum offset", str(header.checksum_offset))

    console.print(table)


@cli.command("fstab")
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.pass_context
def list_fstab(ctx: click.Context, path: Path) -> None:
    """List fstab entries as fsmgr sees them."""
    json_output = ctx.obj.get("json_output", False)
    entries = load_fstab(path)

    if json_output:
        click.echo(json.dumps([e.to_dict() for e in entries], indent=2))
        return

    table = Table(title=str(path))
    table.add_column("Device", style="cyan")
    table.add_column("Mount", style="blue")
    table.add_column("Type", style="yellow")
    table.add_column("Length", style="green")
    table.add_column("Flags", style="magenta")

    for entry in entries:
        table.add_row(
            entry.block_device,
            entry.mount_point,
            entry.fs_type,
            humanize.naturalsize(entry.length, binary=True) if entry.length else "auto",
            ", ".join(sorted(f.value for f in entry.flags)),
        )

    console.print(table)


def main() -> None:
    """Main entry point."""
    try:
        cli(obj={})
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
