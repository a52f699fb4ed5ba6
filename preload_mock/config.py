from typing import Set, Tuple

# Placeholder emitted whenever a value or type cannot be determined statically.
UNKNOWN_VALUE = 'undefined as any'

DEFAULT_MOUNT_NAME = 'preload'

# Re-export targets without an extension are tried with these, in order.
DEFAULT_SOURCE_EXTENSION = '.ts'
ALTERNATE_SOURCE_EXTENSION = '.js'

SOURCE_EXTENSIONS: Set[str] = {
    '.ts',
    '.tsx',
    '.mts',
    '.cts',
    '.js',
    '.jsx',
    '.mjs',
    '.cjs',
}

INDEX_FILE_NAMES: Tuple[str, ...] = (
    'index.ts',
    'index.js',
)

# Generated files live next to the preload entry.
AUTO_MOCK_ID = '_mock.auto'
AUTO_MOCK_FILE_NAME = f'{AUTO_MOCK_ID}.ts'
USER_MOCK_SUFFIX = '.mock.ts'
DECLARATION_FILE_TEMPLATE = '_{preload_id}.d.ts'

GENERATED_BY = 'preload-mock'
