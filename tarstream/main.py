import click
import datetime
import logging
from shakenfist_utilities import logs
import sys

from tarstream import archive
from tarstream import compression
from tarstream import constants
from tarstream import header
from tarstream import paths
from tarstream import reader
from tarstream import sources
from tarstream import streams
from tarstream import uri
from tarstream import util


LOG = logs.setup_console(__name__)


TYPE_NAMES = {
    constants.TYPE_REGULAR: '-',
    constants.TYPE_HARDLINK: 'h',
    constants.TYPE_SYMLINK: 'l',
    constants.TYPE_CHARDEV: 'c',
    constants.TYPE_BLOCKDEV: 'b',
    constants.TYPE_DIRECTORY: 'd',
    constants.TYPE_FIFO: 'p',
    constants.TYPE_CONTIGUOUS: 'C',
}


def _octal(ctx, param, value):
    if value is None:
        return None
    try:
        return int(value, 8)
    except ValueError:
        raise click.BadParameter('%s is not an octal number' % value)


@click.group()
@click.option('--verbose', is_flag=True)
@click.version_option(version=util.get_version())
@click.pass_context
def cli(ctx, verbose=None):
    if verbose:
        logging.basicConfig(level=logging.DEBUG)
        LOG.setLevel(logging.DEBUG)

    if not ctx.obj:
        ctx.obj = {}
    ctx.obj['VERBOSE'] = verbose


@click.command('create')
@click.argument('output')
@click.argument('specs', nargs=-1, required=True)
@click.option('--compression', 'compression_type',
              type=click.Choice([constants.COMPRESSION_AUTO,
                                 constants.COMPRESSION_GZIP,
                                 constants.COMPRESSION_ZSTD,
                                 constants.COMPRESSION_NONE]),
              default=constants.COMPRESSION_AUTO,
              envvar='TARSTREAM_COMPRESSION',
              help='Compression for the archive, auto picks from OUTPUT')
@click.option('--level', type=int, default=None,
              envvar='TARSTREAM_LEVEL', help='Compression level')
@click.option('--chunk-size', type=int, default=constants.BLOCK_SIZE,
              envvar='TARSTREAM_CHUNK_SIZE',
              help='Chunk size for in-memory content, a multiple of 512')
@click.option('--read-size', type=int, default=streams.DEFAULT_READ_SIZE,
              envvar='TARSTREAM_READ_SIZE',
              help='Chunk size for reading files and HTTP bodies')
@click.option('--mode', default=None, callback=_octal,
              envvar='TARSTREAM_MODE',
              help='Default octal mode for entries without one')
@click.option('--uid', type=int, default=None, envvar='TARSTREAM_UID')
@click.option('--gid', type=int, default=None, envvar='TARSTREAM_GID')
@click.option('--uname', default=None, envvar='TARSTREAM_UNAME')
@click.option('--gname', default=None, envvar='TARSTREAM_GNAME')
@click.option('--mtime', type=int, default=None, envvar='TARSTREAM_MTIME',
              help='Default mtime in seconds since the epoch')
@click.pass_context
def create_cmd(ctx, output, specs, compression_type, level, chunk_size,
               read_size, mode, uid, gid, uname, gname, mtime):
    """Create a tar archive from one or more entry specs.

    OUTPUT is a filename, or - for standard output.

    \b
    Each SPEC is ARCNAME=SOURCE where SOURCE is one of:
      /path/to/file, file:///path    - A local file
      http://..., https://...        - Streamed from a web server
      zero://SIZE                    - SIZE zero bytes
      -?size=N                       - N bytes of standard input

    \b
    Entry metadata can be set with query options on SOURCE:
      mode (octal), uid, gid, uname, gname, mtime, size, typeflag,
      linkname, devmajor, devminor

    \b
    Examples:
      tarstream create out.tar docs/readme.txt=README.md
      tarstream create out.tar.zst big.bin=zero://9663676416
      tarstream create - 'etc/motd=/tmp/motd?mode=644&uname=root'
    """
    defaults = {}
    for key, value in (('mode', mode), ('uid', uid), ('gid', gid),
                       ('uname', uname), ('gname', gname), ('mtime', mtime)):
        if value is not None:
            defaults[key] = value

    if compression_type == constants.COMPRESSION_AUTO:
        if output == '-':
            compression_type = constants.COMPRESSION_NONE
        else:
            compression_type = \
                compression.detect_compression_from_filename(output)
    LOG.debug('Using compression %s' % compression_type)

    try:
        descriptors = []
        for spec_string in specs:
            spec = uri.parse_source(spec_string)
            descriptors.append(sources.make_descriptor(
                spec, defaults=defaults, read_size=read_size))

        tar = archive.Tarball(descriptors, chunk_size=chunk_size)
        stream = compression.compress_stream(
            tar.stream, compression_type, level=level)

        if output == '-':
            written = streams.drain(stream, click.get_binary_stream('stdout'))
        else:
            with open(output, 'wb') as f:
                written = streams.drain(stream, f)

    except (uri.URIParseError, sources.SourceError, header.PreconditionError,
            streams.ContentSizeError, util.APIException, OSError) as e:
        click.echo('Error: %s' % e, err=True)
        sys.exit(1)

    LOG.info('Wrote %d entries, %d bytes to %s'
             % (len(descriptors), written, output))


cli.add_command(create_cmd)


@click.command('list')
@click.argument('archive_path')
@click.pass_context
def list_cmd(ctx, archive_path):
    """List the entries of ARCHIVE_PATH, which may be compressed."""
    try:
        for decoded in reader.read_archive(archive_path):
            mtime = datetime.datetime.fromtimestamp(
                decoded.mtime, tz=datetime.timezone.utc)
            owner = '%s/%s' % (decoded.uname or decoded.uid,
                               decoded.gname or decoded.gid)
            flags = ' pax' if decoded.pax_records else ''
            click.echo('%s%s %s %12d %s %s%s'
                       % (TYPE_NAMES.get(decoded.typeflag, '?'),
                          '%04o' % decoded.mode, owner, decoded.size,
                          mtime.strftime('%Y-%m-%d %H:%M'), decoded.path,
                          flags))
    except (reader.ArchiveFormatError, OSError) as e:
        click.echo('Error: %s' % e, err=True)
        sys.exit(1)


cli.add_command(list_cmd)


@click.command('split')
@click.argument('path')
def split_cmd(path):
    """Show how PATH is stored in a USTAR header."""
    prefix_and_name = paths.split_path(path)
    if prefix_and_name is None:
        click.echo('pax path: %s' % path)
        click.echo('name: %s' % paths.path_cut_name(path).decode(
            'utf-8', errors='replace'))
        return

    prefix, name = prefix_and_name
    click.echo('prefix: %s' % prefix.decode('utf-8'))
    click.echo('name: %s' % name.decode('utf-8'))


cli.add_command(split_cmd)
