"""
ltcsync command line.

    ltcsync read take_1-2.wav                # show the first LTC frame
    ltcsync stamp take_1-2.wav               # write BWF metadata to siblings
    ltcsync stamp Audio/ --pattern 1-2       # every take in a directory
    ltcsync generate test.wav -s 01:00:00:00 # LTC test signal
"""

import calendar
import datetime
import logging
import subprocess
import sys
from pathlib import Path

import click

from . import DEFAULT_SAMPLE_RATE, DEFAULT_MAX_SECONDS, __version__
from .bwf import files_by_pattern, find_sibling_files, write_metadata
from .encoder import LTCEncoder, date_user_bits
from .ltcdump import run_ltcdump
from .metadata import derive_metadata
from .reader import read_first_frame
from .samples import SampleBuffer
from .timecode import Timecode, format_timecode
from .validate import CenturyPolicy, ValidationPolicy, validate

_logger = logging.getLogger(__name__)


def _parse_timecode(ctx, param, value):
    """click callback: HH:MM:SS:FF, or HH:MM:SS;FF for drop-frame."""
    if value is None:
        return None
    try:
        hh, mm, rest = value.split(":", 2)
        separator = ";" if ";" in rest else ":"
        ss, ff = rest.split(separator)
        return Timecode(int(hh), int(mm), int(ss), int(ff), drop_frame=separator == ";")
    except ValueError:
        raise click.BadParameter(f"expected HH:MM:SS:FF, got {value!r}")


def _reference_timecode(source: Path, channel: int, max_seconds: float, ltcdump_fallback: bool) -> Timecode:
    """First LTC frame of the source, decoded natively or by ltcdump."""
    buffer = SampleBuffer.from_file(source)
    result = read_first_frame(buffer, channel=channel, max_seconds=max_seconds)
    if result.found:
        _logger.info(f"Using reference frame: {format_timecode(result.timecode)} at sample {result.sample_position}")
        return result.timecode

    if ltcdump_fallback:
        frames = run_ltcdump(str(source))
        if frames:
            _logger.info(f"Using ltcdump reference frame: {format_timecode(frames[0].timecode)}")
            return frames[0].timecode

    raise click.ClickException(f"No valid LTC frames found in {source.name} ({result.status.value})")


@click.group()
@click.version_option(__version__)
@click.option("-v", "--verbose", is_flag=True, help="Verbose output with detailed logging")
def main(verbose: bool):
    """Extract LTC timecode from audio and stamp Broadcast WAV metadata."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


@main.command()
@click.argument("input", type=click.Path(exists=True, dir_okay=False))
@click.option("-c", "--channel", type=int, default=0, help="Channel carrying LTC (default: 0)")
@click.option(
    "-m", "--max-seconds",
    type=click.FloatRange(min=0),
    default=DEFAULT_MAX_SECONDS,
    help=f"Seconds of audio to search (default: {DEFAULT_MAX_SECONDS:g})",
)
@click.option(
    "--century",
    type=click.Choice([policy.value for policy in CenturyPolicy]),
    default=CenturyPolicy.PREFIX_20.value,
    help="Two-digit year expansion for the displayed date (default: prefix-20)",
)
def read(input: str, channel: int, max_seconds: float, century: str):
    """
    Show the first LTC frame found in INPUT.
    """
    try:
        buffer = SampleBuffer.from_file(input)
        result = read_first_frame(buffer, channel=channel, max_seconds=max_seconds)
    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not result.found:
        click.echo(f"No valid LTC frame found ({result.status.value})", err=True)
        sys.exit(1)

    tc = result.timecode
    click.echo("=== LTC Frame Information ===")
    click.echo(
        f"Sample Position: {result.sample_position} "
        f"({result.sample_position / buffer.sample_rate:.3f}s into file)"
    )
    click.echo(f"Timecode: {format_timecode(tc)}")
    click.echo(f"Drop Frame: {'Yes' if tc.drop_frame else 'No'}")
    click.echo(f"Color Frame: {'Yes' if tc.color_frame else 'No'}")
    click.echo(f"Sync Matches: {tc.sync_matches}/16")
    click.echo("Binary Groups:")
    for number, group in enumerate(tc.user_bits, start=1):
        click.echo(f"  Group {number}: 0x{group:X}")
    click.echo(f"User Bits: {tc.user_bits_string}")

    digits = tc.date_digits
    if digits is not None:
        yy, month, day, extra = digits
        if 1 <= month <= 12 and 1 <= day <= 31:
            year = CenturyPolicy(century).expand(yy)
            extra_text = f" (extra: {extra})" if extra != "00" else ""
            click.echo(f"Date: {calendar.month_name[month]} {day}, {year}{extra_text}")

    if tc.drop_frame:
        click.echo("Frame Rate: 29.97 fps (Drop Frame)")
    else:
        click.echo("Frame Rate: Likely 30fps, 25fps, or 24fps (Non-Drop Frame)")

    if result.confirmed is False:
        click.echo("Warning: position-anchored decode did not confirm this frame", err=True)


@main.command()
@click.argument("source", type=click.Path(exists=True))
@click.option("-p", "--pattern", help="Track pattern holding LTC when SOURCE is a directory (e.g. 1-2)")
@click.option("-c", "--channel", type=int, default=0, help="Channel carrying LTC (default: 0)")
@click.option(
    "-m", "--max-seconds",
    type=click.FloatRange(min=0),
    default=DEFAULT_MAX_SECONDS,
    help=f"Seconds of audio to search (default: {DEFAULT_MAX_SECONDS:g})",
)
@click.option(
    "-s", "--sample-rate",
    type=int,
    default=DEFAULT_SAMPLE_RATE,
    help=f"Rate TimeReference is counted at (default: {DEFAULT_SAMPLE_RATE})",
)
@click.option(
    "-r", "--frame-rate",
    type=click.Choice(["23.976", "24", "25", "29.97", "30"]),
    default=None,
    help="Frame rate (default: 29.97 if drop-frame, else 30)",
)
@click.option(
    "--century",
    type=click.Choice([policy.value for policy in CenturyPolicy]),
    default=CenturyPolicy.PREFIX_20.value,
    help="Two-digit year expansion (default: prefix-20)",
)
@click.option("--raw-minutes-seconds", is_flag=True, help="Flag minute/second >= 60 instead of wrapping them")
@click.option("--ltcdump-fallback", is_flag=True, help="Try ltcdump when the built-in decoder finds nothing")
@click.option("-n", "--dry-run", is_flag=True, help="Show bwfmetaedit commands without running them")
def stamp(
    source: str,
    pattern: str,
    channel: int,
    max_seconds: float,
    sample_rate: int,
    frame_rate: str,
    century: str,
    raw_minutes_seconds: bool,
    ltcdump_fallback: bool,
    dry_run: bool,
):
    """
    Write TimeReference, OriginationTime and OriginationDate from the LTC in
    SOURCE to its sibling recordings.

    SOURCE is either the WAV file carrying LTC or a directory of takes; for a
    directory, --pattern picks which track of each take carries LTC.
    """
    source_path = Path(source)
    policy = ValidationPolicy(
        century=CenturyPolicy(century),
        wrap_minutes_seconds=not raw_minutes_seconds,
    )
    fps_override = float(frame_rate) if frame_rate is not None else None

    if source_path.is_dir():
        groups = files_by_pattern(source_path)
        if not groups:
            click.echo(f"No WAV files with a track pattern in {source_path}", err=True)
            sys.exit(1)
        if pattern not in groups:
            click.echo("Available patterns:", err=True)
            for name, files in groups.items():
                click.echo(f"  {name} ({len(files)} files)", err=True)
            click.echo("Choose one with --pattern.", err=True)
            sys.exit(1)
        sources = groups[pattern]
    else:
        sources = [source_path]

    failures = 0
    for source_file in sources:
        siblings = find_sibling_files(source_file)
        if not siblings:
            click.echo(f"{source_file.name}: no sibling files to update")
            continue

        try:
            tc = _reference_timecode(source_file, channel, max_seconds, ltcdump_fallback)
            validated = validate(tc, policy)
            metadata = derive_metadata(validated, sample_rate, fps_override)
        except click.ClickException as e:
            click.echo(f"{source_file.name}: {e.format_message()}", err=True)
            failures += 1
            continue
        except Exception as e:
            click.echo(f"{source_file.name}: Error: {e}", err=True)
            failures += 1
            continue

        click.echo(
            f"{source_file.name}: {format_timecode(validated.timecode)} -> "
            f"TimeReference={metadata.time_reference} "
            f"OriginationTime={metadata.origination_time} "
            f"OriginationDate={metadata.origination_date} ({metadata.frame_rate}fps)"
        )

        for sibling in siblings:
            try:
                command = write_metadata(sibling, metadata, dry_run=dry_run)
            except (OSError, subprocess.CalledProcessError) as e:
                click.echo(f"  Failed to update {sibling.name}: {e}", err=True)
                failures += 1
                continue
            if dry_run:
                click.echo(f"  would run: {' '.join(command)}")
            else:
                click.echo(f"  updated {sibling.name}")

    if failures:
        sys.exit(1)


@main.command()
@click.argument("output", type=click.Path(dir_okay=False))
@click.option(
    "-s", "--start",
    callback=_parse_timecode,
    default="00:00:00:00",
    help="First timecode, HH:MM:SS:FF (HH:MM:SS;FF for drop-frame)",
)
@click.option("-f", "--frames", "frame_count", type=int, default=300, help="Number of frames (default: 300)")
@click.option(
    "-r", "--frame-rate",
    type=click.Choice(["24", "25", "29.97", "30"]),
    default="30",
    help="Frame rate (default: 30)",
)
@click.option(
    "-d", "--date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Recording date stored in the user bits (YYYY-MM-DD)",
)
@click.option("-a", "--amplitude", type=float, default=0.7, help="Amplitude 0.0-1.0 (default: 0.7)")
@click.option(
    "--sample-rate",
    type=int,
    default=DEFAULT_SAMPLE_RATE,
    help=f"Sample rate in Hz (default: {DEFAULT_SAMPLE_RATE})",
)
@click.option("-w", "--waveform", type=click.Choice(["square", "sine"]), default="square", help="Waveform shape")
def generate(
    output: str,
    start: Timecode,
    frame_count: int,
    frame_rate: str,
    date: datetime.datetime,
    amplitude: float,
    sample_rate: int,
    waveform: str,
):
    """
    Generate an LTC test signal in OUTPUT.
    """
    fps = float(frame_rate)
    if start.drop_frame and fps != 29.97:
        click.echo("Drop-frame timecode needs --frame-rate 29.97", err=True)
        sys.exit(1)

    if date is not None:
        start = Timecode(
            start.hours, start.minutes, start.seconds, start.frames,
            drop_frame=start.drop_frame,
            user_bits=date_user_bits(date.date()),
        )

    encoder = LTCEncoder(sample_rate=sample_rate, frame_rate=fps, waveform=waveform)
    try:
        encoder.generate_to_file(output, start, frame_count, amplitude)
    except Exception as e:
        click.echo(f"Error generating file: {e}", err=True)
        sys.exit(1)

    click.echo(f"✓ Generated {output} ({frame_count} frames from {format_timecode(start)} at {frame_rate} fps)")


if __name__ == "__main__":
    main()
