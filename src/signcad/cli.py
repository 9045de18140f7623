"""
Command line front end.

Usage:
    signcad build [CONFIG.yaml] [--text LINE ...] [--format stl|3mf ...] [--out DIR]
    signcad params > sign.yaml
    signcad recommend [CONFIG.yaml] [--text LINE ...]

``build`` loads the parameter file (if any), applies the command line
overrides, generates the assembly and writes one file per part.
Exit status: 0 on success, 1 when generation fails, 2 on bad input.
"""

import argparse
import logging
import os
import sys

from signcad.errors import GenerationError, ParameterError
from signcad.io import export_assembly
from signcad.params import (ALIGNMENTS, BACKPLATE_SHAPES, LED_TYPES, MOUNT_TYPES,
                            LineSpec, Parameters, dump_parameters, load_parameters)

logger = logging.getLogger(__name__)

DRILL_TEMPLATE_NAME = 'drilling_template.svg'


def _overrides(args) -> dict:
    changes = {}
    if args.text:
        changes['lines'] = tuple(LineSpec(t, args.align) for t in args.text)
    for attr, key in (('font', 'font'), ('shape', 'backplate_shape'),
                      ('mount', 'mount_type'), ('led', 'led_type'),
                      ('height', 'height_mm'), ('depth', 'depth_mm'),
                      ('scale', 'scale_factor')):
        value = getattr(args, attr, None)
        if value is not None:
            changes[key] = value
    if getattr(args, 'no_housing', False):
        changes['housing'] = False
    return changes


def cmd_build(args) -> int:
    from signcad.assembly import drilling_template_svg
    from signcad.pipeline import generate

    try:
        params = load_parameters(args.config) if args.config else Parameters()
        params = params.replace(**_overrides(args))
    except (ParameterError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    try:
        assembly = generate(params)
    except GenerationError as exc:
        print(exc.user_message, file=sys.stderr)
        return 1

    formats = args.format or ['stl']
    try:
        paths = export_assembly(assembly, args.out, formats)
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    for path in paths:
        print(f"Exported to: {path}")

    if args.drill_template:
        if assembly.mounting_points:
            path = os.path.join(args.out, DRILL_TEMPLATE_NAME)
            with open(path, 'w', encoding='utf-8') as f:
                f.write(drilling_template_svg(assembly.mounting_points, params))
            print(f"Drilling template: {path}")
        else:
            print("No mounting points; drilling template skipped", file=sys.stderr)

    w, h, d = assembly.dimensions_mm()
    print(f"Overall size: {w:.1f} x {h:.1f} x {d:.1f} mm")
    for problem in assembly.diagnostics:
        print(f"Warning: {problem}", file=sys.stderr)
    return 0


def cmd_params(args) -> int:
    try:
        params = load_parameters(args.config) if args.config else Parameters()
    except (ParameterError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    dump_parameters(params, sys.stdout)
    return 0


def cmd_recommend(args) -> int:
    from signcad.recommend import recommendations

    try:
        params = load_parameters(args.config) if args.config else Parameters()
        params = params.replace(**_overrides(args))
    except (ParameterError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    for topic, advice in recommendations(params).as_dict().items():
        print(f"{topic.capitalize()}: {advice}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='signcad',
        description='Generate printable house-number signs',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')

    subparsers = parser.add_subparsers(dest='action', required=True)

    build_cmd = subparsers.add_parser('build', help='Generate and export a sign')
    build_cmd.add_argument('config', nargs='?', help='YAML parameter file')
    build_cmd.add_argument('-t', '--text', action='append', metavar='LINE',
                           help='Text line (can be repeated)')
    build_cmd.add_argument('--align', choices=ALIGNMENTS, default='center',
                           help='Alignment for --text lines')
    build_cmd.add_argument('--font', help='"block", a font file or a system font name')
    build_cmd.add_argument('--shape', choices=BACKPLATE_SHAPES, help='Backplate shape')
    build_cmd.add_argument('--mount', choices=MOUNT_TYPES, help='Mounting method')
    build_cmd.add_argument('--led', choices=LED_TYPES, help='LED type')
    build_cmd.add_argument('--height', type=float, help='Text height in mm')
    build_cmd.add_argument('--depth', type=float, help='Letter depth in mm')
    build_cmd.add_argument('--scale', type=float, help='Uniform scale factor')
    build_cmd.add_argument('--no-housing', action='store_true',
                           help='Emit standalone letters only')
    build_cmd.add_argument('-f', '--format', action='append', choices=('stl', '3mf'),
                           help='Output format (can be repeated; default stl)')
    build_cmd.add_argument('-o', '--out', default='out', metavar='DIR',
                           help='Output directory')
    build_cmd.add_argument('--drill-template', action='store_true',
                           help='Also write a 1:1 SVG drilling template')

    rec_cmd = subparsers.add_parser('recommend', help='Suggest font, size, style and material')
    rec_cmd.add_argument('config', nargs='?', help='YAML parameter file')
    rec_cmd.add_argument('-t', '--text', action='append', metavar='LINE',
                         help='Text line (can be repeated)')
    rec_cmd.add_argument('--align', choices=ALIGNMENTS, default='center',
                         help='Alignment for --text lines')
    rec_cmd.add_argument('--shape', choices=BACKPLATE_SHAPES, help='Backplate shape')
    rec_cmd.add_argument('--no-housing', action='store_true',
                         help='Advise for standalone letters')

    params_parser = subparsers.add_parser('params', help='Print parameters as YAML')
    params_parser.add_argument('config', nargs='?', help='YAML parameter file')

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s %(name)s: %(message)s',
    )

    if args.action == 'build':
        return cmd_build(args)
    elif args.action == 'params':
        return cmd_params(args)
    elif args.action == 'recommend':
        return cmd_recommend(args)
    parser.print_help()
    return 2


if __name__ == '__main__':
    sys.exit(main())
