"""
Epicycle Splines Command Line Interface

Command-line tools for turning a point file into an epicycle animation,
animating a raw coefficient file, drawing the fitted spline path, and
saving coefficients with a fit report.
"""

import argparse
import logging
import sys
from typing import List, Optional

import matplotlib.pyplot as plt

from . import __version__
from .api import (
    compute_path_coefficients,
    load_coefficients,
    load_points,
    plot_fit,
    render_epicycles,
    render_spline,
    save_coefficients,
    save_report,
)
from .exceptions import EpicycleSplinesError
from .utils.logging import setup_logging
from .visualization.epicycle_plots import RenderConfig

logger = logging.getLogger(__name__)


def setup_cli_logging(verbose: int = 0):
    """Setup logging for CLI with appropriate verbosity"""
    if verbose >= 2:
        level = logging.DEBUG
    elif verbose >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    setup_logging(level)


def print_banner():
    """Print Epicycle Splines banner"""
    banner = f"""
Epicycle Splines v{__version__}
Draw time-tagged paths as chains of rotating vectors
"""
    print(banner)


def print_success(message: str):
    print(f"[ok] {message}")


def print_error(message: str):
    print(f"[error] {message}", file=sys.stderr)


def print_info(message: str):
    print(f"[info] {message}")


def render_config_from_args(args) -> RenderConfig:
    return RenderConfig(
        width=args.width,
        height=args.height,
        n_steps=args.steps,
        foreground=args.foreground,
        background=args.background,
        fps=args.fps,
        show_circles=not args.no_circles,
    )


def animate_command(args):
    """Handle points -> coefficients -> epicycle GIF"""
    config = render_config_from_args(args)
    points = load_points(args.points)
    result = compute_path_coefficients(points, n_coeffs=args.coeffs + 1)

    print(result.coefficients, end='')
    output = render_epicycles(result.coefficients, args.output, config)
    print_success(f"Animation saved to: {output}")
    return 0


def coeffs_command(args):
    """Handle raw coefficient file -> epicycle GIF"""
    config = render_config_from_args(args)
    coeffs = load_coefficients(args.coefficients)
    if args.coeffs is not None and args.coeffs + 1 < len(coeffs):
        coeffs = coeffs.truncated(args.coeffs + 1)

    print(coeffs, end='')
    output = render_epicycles(coeffs, args.output, config)
    print_success(f"Animation saved to: {output}")
    return 0


def spline_command(args):
    """Handle points -> drawing of the fitted path"""
    config = render_config_from_args(args)
    points = load_points(args.points)
    result = compute_path_coefficients(points, n_coeffs=1, validate=False)

    output = render_spline(result.sx, result.sy, args.output, config)
    print_success(f"Spline drawing saved to: {output}")
    return 0


def fit_command(args):
    """Handle points -> saved coefficients and report"""
    points = load_points(args.points)
    result = compute_path_coefficients(points, n_coeffs=args.coeffs + 1,
                                       tolerance=args.tolerance)

    stats = result.stats
    print_success("Fit completed")
    print_info(f"Segments: {stats['n_segments']} ({stats['n_linear_segments']} linear) "
               f"over [{stats['domain'][0]:g}, {stats['domain'][1]:g}]")
    print_info(f"Harmonics per side: {stats['n_coeffs']}")
    if result.validation is not None:
        print_info(f"Fit quality: {result.validation.quality_grade}")
        metrics = result.validation.metrics
        if 'reconstruction_rms' in metrics:
            print_info(f"Reconstruction RMS: {metrics['reconstruction_rms']:.4g}")

    if args.output:
        save_coefficients(result.coefficients, args.output)
        print_info(f"Coefficients saved to: {args.output}")
    else:
        print(result.coefficients, end='')

    if args.report:
        save_report(result, args.report, source=points.source)
        print_info(f"Report saved to: {args.report}")

    if args.plot:
        fig = plot_fit(result, points, save_path=args.plot)
        plt.close(fig)
        print_info(f"Plot saved to: {args.plot}")
    return 0


def info_command(args):
    """Show version and dependency information"""
    print("Installation Information:")
    print(f"   Python: {sys.version.split()[0]}")

    print("\nDependencies:")
    dependencies = [
        ('numpy', 'numpy'),
        ('scipy', 'scipy'),
        ('matplotlib', 'matplotlib'),
        ('seaborn', 'seaborn'),
        ('tqdm', 'tqdm'),
        ('pillow', 'PIL'),
    ]

    for name, module in dependencies:
        try:
            mod = __import__(module)
            version = getattr(mod, '__version__', 'unknown')
            print(f"   {name}: {version}")
        except ImportError:
            print(f"   {name}: not installed")
    return 0


def _add_render_arguments(parser):
    parser.add_argument(
        '--width', '-W',
        type=int,
        default=300,
        help='Output width in pixels (default: 300)'
    )
    parser.add_argument(
        '--height', '-H',
        type=int,
        default=200,
        help='Output height in pixels (default: 200)'
    )
    parser.add_argument(
        '--steps', '-n',
        type=int,
        default=200,
        help='Frames per period, or samples along the path (default: 200)'
    )
    parser.add_argument(
        '--foreground', '-f',
        default='0x000000',
        help='Line colour as 0xRRGGBB (default: 0x000000)'
    )
    parser.add_argument(
        '--background', '-b',
        default='0xFFFFFF',
        help='Background colour as 0xRRGGBB (default: 0xFFFFFF)'
    )
    parser.add_argument(
        '--fps',
        type=int,
        default=30,
        help='Animation frame rate (default: 30)'
    )
    parser.add_argument(
        '--no-circles',
        action='store_true',
        help='Draw only the vector chain, without circles'
    )


def create_parser():
    """Create the main argument parser"""

    parser = argparse.ArgumentParser(
        prog='epicycle-splines',
        description='Draw time-tagged paths as chains of rotating vectors',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fit a point file and animate it with 10 harmonics on each side
  epicycle-splines animate heart.txt -c 10 -o heart.gif

  # Animate a raw coefficient file
  epicycle-splines coeffs heart_coeffs.txt -o heart.gif

  # Draw the fitted spline path only
  epicycle-splines spline heart.txt -o path.gif

  # Save coefficients, a JSON report and a fit plot
  epicycle-splines fit heart.txt -c 20 -o coeffs.txt --report fit.json --plot fit.png
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'Epicycle Splines {__version__}'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (use -v, -vv for more verbose output)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Animate command
    animate_parser = subparsers.add_parser(
        'animate',
        help='Fit a point file and animate its epicycles'
    )
    animate_parser.add_argument('points', help='Point file, one "t: (x, y)" per line')
    animate_parser.add_argument(
        '--output', '-o',
        default='out.gif',
        help='Output GIF (default: out.gif)'
    )
    animate_parser.add_argument(
        '--coeffs', '-c',
        type=int,
        default=5,
        help='Harmonics per side besides the DC term (default: 5)'
    )
    _add_render_arguments(animate_parser)

    # Coeffs command
    coeffs_parser = subparsers.add_parser(
        'coeffs',
        help='Animate a raw coefficient file'
    )
    coeffs_parser.add_argument('coefficients', help='Coefficient file, one "(re,im) & (re,im)" per line')
    coeffs_parser.add_argument(
        '--output', '-o',
        default='out.gif',
        help='Output GIF (default: out.gif)'
    )
    coeffs_parser.add_argument(
        '--coeffs', '-c',
        type=int,
        default=None,
        help='Keep only this many harmonics besides DC (default: all)'
    )
    _add_render_arguments(coeffs_parser)

    # Spline command
    spline_parser = subparsers.add_parser(
        'spline',
        help='Draw the spline path fitted through a point file'
    )
    spline_parser.add_argument('points', help='Point file, one "t: (x, y)" per line')
    spline_parser.add_argument(
        '--output', '-o',
        default='out.gif',
        help='Output image (default: out.gif)'
    )
    _add_render_arguments(spline_parser)

    # Fit command
    fit_parser = subparsers.add_parser(
        'fit',
        help='Compute and save coefficients for a point file'
    )
    fit_parser.add_argument('points', help='Point file, one "t: (x, y)" per line')
    fit_parser.add_argument(
        '--coeffs', '-c',
        type=int,
        default=5,
        help='Harmonics per side besides the DC term (default: 5)'
    )
    fit_parser.add_argument(
        '--output', '-o',
        help='Coefficient file to write (printed when omitted)'
    )
    fit_parser.add_argument(
        '--report',
        help='JSON report of the fit'
    )
    fit_parser.add_argument(
        '--plot',
        help='Static plot of samples, spline and Fourier redraw'
    )
    fit_parser.add_argument(
        '--tolerance',
        type=float,
        default=1e-6,
        help='Relative tolerance of the fit checks (default: 1e-6)'
    )

    # Info command
    subparsers.add_parser(
        'info',
        help='Show version and dependency information'
    )

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point"""

    parser = create_parser()
    args = parser.parse_args(argv)

    setup_cli_logging(args.verbose)

    if not args.command or args.command == 'info':
        print_banner()

    try:
        if args.command == 'animate':
            return animate_command(args)
        elif args.command == 'coeffs':
            return coeffs_command(args)
        elif args.command == 'spline':
            return spline_command(args)
        elif args.command == 'fit':
            return fit_command(args)
        elif args.command == 'info':
            return info_command(args)
        else:
            parser.print_help()
            return 0

    except KeyboardInterrupt:
        print_info("Operation cancelled by user")
        return 1
    except (EpicycleSplinesError, OSError) as e:
        print_error(str(e))
        if args.verbose >= 2:
            import traceback
            traceback.print_exc()
        return 1


if __name__ == '__main__':
    sys.exit(main())
