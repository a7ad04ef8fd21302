# File Utilities
# Filename parsing, ID3 tagging, scanning and renaming

from .filename_parser import parse_filename, parse_stem, build_search_query
from .tagger import read_tags, write_tags, merge_tags, TagReadError, TagWriteError
from .scanner import AudioFile, scan_directory, load_single_file, scan_path, UnsupportedFileError
from .renamer import sanitize_filename, build_filename, rename_file, RenameCollisionError

__all__ = [
    'parse_filename',
    'parse_stem',
    'build_search_query',
    'read_tags',
    'write_tags',
    'merge_tags',
    'TagReadError',
    'TagWriteError',
    'AudioFile',
    'scan_directory',
    'load_single_file',
    'scan_path',
    'UnsupportedFileError',
    'sanitize_filename',
    'build_filename',
    'rename_file',
    'RenameCollisionError'
]
