"""Command-line interface for purepart"""
import os
import sys
import argparse
import logging
import time
from collections import Counter
import numpy as np
import imageio.v3 as iio

from .enumerators import ASTC_BLOCK_FOOTPRINTS
from .enums import SEPARATE_ALPHA_MODES, THREE_SUBSET_MODES, TWO_SUBSET_MODES
from .partition import PartitionTable
from .registry import PartitionFormat, default_registry
from .selection import select_shapes, selections_to_array


def main(argv=None):
    """Command-line interface for purepart"""
    parser = argparse.ArgumentParser(
        description='Enumerate and match ASTC / BPTC block partitions',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  purepart enumerate bptc                           # Count BC7 4x4 partitions
  purepart enumerate astc -b 6x6                    # Count ASTC 6x6 partitions
  purepart enumerate astc --all                     # Every ASTC 2D footprint
  purepart enumerate astc -b 8x8 -o sheet.png       # Save a contact sheet
  purepart query bptc 0000000011111111              # Closest BC7 shape
  purepart query astc 000111000111000111 -b 6x3 -k 5
  purepart match labels.png                         # BC7 shape selection
  purepart match labels.png --rgba image.png -o selection.npy
        """
    )
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Show debug logging')
    subparsers = parser.add_subparsers(dest='command', required=True)

    enum_parser = subparsers.add_parser('enumerate', help='Enumerate distinct partitions')
    enum_parser.add_argument('format', choices=[f.value for f in PartitionFormat])
    enum_parser.add_argument('-b', '--block', type=parse_block_size, default=(4, 4),
                             help='Block size as WxH (default: 4x4)')
    enum_parser.add_argument('--all', action='store_true',
                             help='Enumerate every ASTC 2D block footprint')
    enum_parser.add_argument('-o', '--output',
                             help='Write a contact sheet of the partitions (e.g., sheet.png)')

    query_parser = subparsers.add_parser('query', help='Find the closest partitions to a pattern')
    query_parser.add_argument('format', choices=[f.value for f in PartitionFormat])
    query_parser.add_argument('pattern', help='Row-major subset labels as digits, e.g. 0011001100110011')
    query_parser.add_argument('-b', '--block', type=parse_block_size, default=(4, 4),
                              help='Block size as WxH (default: 4x4)')
    query_parser.add_argument('-k', type=int, default=1,
                              help='Number of neighbours to report (default: 1)')

    match_parser = subparsers.add_parser('match', help='Choose BC7 shapes from a region label map')
    match_parser.add_argument('labels', help='Label map image; grayscale values or packed RGB are region ids')
    match_parser.add_argument('--rgba', help='Source image used to detect opaque blocks')
    match_parser.add_argument('-o', '--output', help='Save per-block selections as .npy')

    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    try:
        if args.command == 'enumerate':
            run_enumerate(args)
        elif args.command == 'query':
            run_query(args)
        else:
            run_match(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)


def parse_block_size(spec: str) -> tuple[int, int]:
    """
    Parse a block size string.

    Args:
        spec: Block size (e.g., "4x4" or "10x6")

    Returns:
        Tuple of (width, height)
    """
    parts = spec.lower().split('x')
    if len(parts) != 2:
        raise argparse.ArgumentTypeError(f"Invalid block size '{spec}', expected WxH")
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid block size '{spec}', expected WxH") from None


def run_enumerate(args):
    fmt = PartitionFormat(args.format)
    if args.all:
        if fmt is not PartitionFormat.ASTC:
            raise ValueError("--all is only meaningful for ASTC")
        shapes = list(ASTC_BLOCK_FOOTPRINTS)
    else:
        shapes = [args.block]

    total_time = 0
    for width, height in shapes:
        start = time.perf_counter()
        tables = default_registry.partitions(fmt, width, height)
        elapsed = time.perf_counter() - start
        total_time += elapsed

        subset_counts = Counter(table.num_subsets for table in tables)
        breakdown = ', '.join(f"{n} subset(s): {subset_counts[n]}" for n in sorted(subset_counts))
        print(f"{len(tables)} {width}x{height} {fmt.name} partitions ({breakdown})")
        print(f"Enumeration time: {elapsed*1000:.2f} ms")

        if args.output:
            output_file = args.output
            if len(shapes) > 1:
                # One sheet per footprint
                output_base, output_ext = os.path.splitext(args.output)
                output_file = f"{output_base}_{width}x{height}{output_ext}"

            sheet = render_contact_sheet(tables)
            iio.imwrite(output_file, sheet)
            print(f"Saved to: {output_file}")
            print(f"Image size: {sheet.shape[1]}x{sheet.shape[0]}")

    if len(shapes) > 1:
        print(f"\nTotal enumeration time: {total_time*1000:.2f} ms")


def run_query(args):
    fmt = PartitionFormat(args.format)
    width, height = args.block
    if not args.pattern.isdigit():
        raise ValueError(f"Pattern must contain only digits, got '{args.pattern}'")

    candidate = PartitionTable(width, height, -1, [int(c) for c in args.pattern]).canonical()

    start = time.perf_counter()
    results, distances = default_registry.closest(fmt, candidate, args.k)
    elapsed = time.perf_counter() - start

    for table, dist in zip(results, distances):
        digits = ''.join(str(int(v)) for v in table.labels)
        print(f"index {table.index:4d}  distance {dist:g}  subsets {table.num_subsets}  {digits}")
    print(f"Query time: {elapsed*1000:.2f} ms")


def run_match(args):
    label_map = load_label_map(args.labels)
    rgba = None
    if args.rgba:
        rgba = load_rgba(args.rgba)

    start = time.perf_counter()
    selections = select_shapes(label_map, rgba)
    elapsed = time.perf_counter() - start

    blocks = [selection for row in selections for selection in row]
    single = sum(1 for s in blocks if not s.selected_modes & (TWO_SUBSET_MODES | THREE_SUBSET_MODES))
    two = sum(1 for s in blocks if s.selected_modes & TWO_SUBSET_MODES)
    three = sum(1 for s in blocks if s.selected_modes & THREE_SUBSET_MODES)
    opaque = sum(1 for s in blocks if not s.selected_modes & SEPARATE_ALPHA_MODES)

    print(f"Label map: {label_map.shape[1]}x{label_map.shape[0]} ({len(np.unique(label_map))} regions)")
    print(f"Blocks: {len(blocks)}")
    print(f"  Single region: {single}")
    print(f"  Two-subset shapes: {two}")
    print(f"  Three-subset shapes: {three}")
    if rgba is not None:
        print(f"  Opaque: {opaque}")
    print(f"Selection time: {elapsed*1000:.2f} ms")

    if args.output:
        np.save(args.output, selections_to_array(selections))
        print(f"Saved to: {args.output}")


def load_label_map(path: str) -> np.ndarray:
    """Read a label map image; RGB(A) pixels are packed into 24-bit region ids"""
    image = iio.imread(path)
    if image.ndim == 2:
        return image.astype(np.int64)
    if image.ndim == 3 and image.shape[2] >= 3:
        rgb = image[..., :3].astype(np.int64)
        return (rgb[..., 0] << 16) | (rgb[..., 1] << 8) | rgb[..., 2]
    raise ValueError(f"Unsupported label map shape {image.shape}")


def load_rgba(path: str) -> np.ndarray:
    """Read an image as (height, width, 4) uint8"""
    image = iio.imread(path)
    if image.dtype == np.uint16:
        image = image >> 8
    if image.ndim == 2:
        image = np.stack([image] * 3, axis=-1)
    if image.shape[2] == 3:
        alpha = np.full(image.shape[:2] + (1,), 255, dtype=image.dtype)
        image = np.concatenate([image, alpha], axis=-1)
    return image.astype(np.uint8)


def render_contact_sheet(tables, scale: int = 4, columns: int = 32) -> np.ndarray:
    """
    Lay partitions out as gray tiles, one gray level per subset.

    Args:
        tables: Sequence of PartitionTable of one block shape
        scale: Pixels per texel
        columns: Tiles per row

    Returns:
        uint8 array of shape (rows * tile_height, columns * tile_width)
    """
    if not tables:
        return np.zeros((1, 1), dtype=np.uint8)

    width, height = tables[0].width, tables[0].height
    tile_w = width * scale + 1
    tile_h = height * scale + 1
    columns = min(columns, len(tables))
    rows = (len(tables) + columns - 1) // columns

    sheet = np.zeros((rows * tile_h, columns * tile_w), dtype=np.uint8)
    for i, table in enumerate(tables):
        tile = table.to_grid().astype(np.uint16) * 85
        tile = np.kron(tile, np.ones((scale, scale), dtype=np.uint16)).astype(np.uint8)
        ty, tx = divmod(i, columns)
        sheet[ty * tile_h:ty * tile_h + height * scale,
              tx * tile_w:tx * tile_w + width * scale] = tile

    return sheet


if __name__ == "__main__":
    main()
