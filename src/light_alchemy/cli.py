import click
from . import config, orchestrator
from .models import CalibrationProfile, ConfigurationError, ExposureConfig
from .utils import format_aperture, format_shutter

# 命令行显示文本 -> 选项表中的数值
SHUTTER_CHOICES = {format_shutter(s).removesuffix(' sec'): s for s in config.SHUTTER_SPEEDS}
APERTURE_CHOICES = {format_aperture(a).removeprefix('f/'): a for a in config.APERTURES}


@click.command()
@click.argument("input_path", type=click.Path(exists=True))
@click.option(
    "--iso",
    default=str(config.DEFAULT_ISO),
    type=click.Choice([str(i) for i in config.ISO_OPTIONS]),
    help="Film speed (ISO). Default is 100.",
)
@click.option(
    "--compensation",
    default=config.DEFAULT_COMPENSATION,
    type=click.FloatRange(min(config.COMPENSATION_STEPS), max(config.COMPENSATION_STEPS)),
    help="Exposure compensation in whole stops (-3 to +3).",
)
@click.option(
    "--priority",
    default=config.DEFAULT_PRIORITY_MODE,
    type=click.Choice(config.PRIORITY_MODES, case_sensitive=False),
    help="Which axis is fixed: shutter (default) or aperture.",
)
@click.option(
    "--shutter",
    default=format_shutter(config.DEFAULT_SHUTTER).removesuffix(' sec'),
    type=click.Choice(list(SHUTTER_CHOICES.keys())),
    help="Chosen shutter speed for shutter priority (e.g. 1/125).",
)
@click.option(
    "--aperture",
    default=format_aperture(config.DEFAULT_APERTURE).removeprefix('f/'),
    type=click.Choice(list(APERTURE_CHOICES.keys())),
    help="Chosen f-number for aperture priority (e.g. 5.6).",
)
@click.option(
    "--metering",
    default=config.DEFAULT_METERING_MODE,
    type=click.Choice(config.METERING_MODES, case_sensitive=False),
    help="Metering mode: center (center-weighted, default) or spot.",
)
@click.option(
    "--smoothing",
    default=config.DEFAULT_SMOOTHING_FACTOR,
    type=float,
    help="EV smoothing factor between 0 and 1. Default is 0.3.",
)
@click.option(
    "--channels",
    default=config.DEFAULT_COLOR_CHANNEL_MODE,
    type=click.Choice(config.COLOR_CHANNEL_MODES, case_sensitive=False),
    help="Histogram mode: combined luminance (default) or separate RGB.",
)
@click.option(
    "--calibration",
    default=config.DEFAULT_CALIBRATION_FACTOR,
    type=float,
    help="Calibration factor (0.5-1.5). Default assumes a standard 18% gray card (1.0).",
)
@click.option(
    "--histogram-dir",
    type=click.Path(file_okay=False),
    help="Directory to save histogram PNGs into.",
)
@click.option(
    "--lock-after",
    type=click.IntRange(min=0),
    default=None,
    help="Engage AE lock before the N-th frame (0-based).",
)
@click.option("--strict", is_flag=True, help="Abort on the first frame that fails instead of skipping it.")
@click.option("--verbose", "-v", is_flag=True, help="Print per-frame metering details.")
def main(input_path, iso, compensation, priority, shutter, aperture, metering, smoothing,
         channels, calibration, histogram_dir, lock_after, strict, verbose):
    """
    Meters an image, or a directory of frames treated as consecutive ticks,
    and recommends a film camera exposure.

    INPUT_PATH: Path to a single image file or a directory of frames.
    """
    try:
        exposure_config = ExposureConfig(
            iso=int(iso),
            compensation=compensation,
            priority_mode=priority.lower(),
            chosen_shutter=SHUTTER_CHOICES[shutter],
            chosen_aperture=APERTURE_CHOICES[aperture],
            metering_mode=metering.lower(),
            smoothing_factor=smoothing,
            color_channel_mode=channels.lower(),
        )
        profile = CalibrationProfile(calibration_factor=calibration)
    except ConfigurationError as e:
        raise click.BadParameter(str(e))

    try:
        orchestrator.process_path(
            input_path=input_path,
            exposure_config=exposure_config,
            profile=profile,
            histogram_dir=histogram_dir,
            lock_after=lock_after,
            logger_func=click.echo,  # Use click.echo for robust Unicode support
            verbose=verbose,
            strict=strict,
        )
    except Exception as e:
        raise click.ClickException(f"A critical error occurred: {e}")


if __name__ == "__main__":
    main()
