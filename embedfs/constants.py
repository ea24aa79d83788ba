# Encoder layout
DEFAULT_BLOCK_WIDTH = 12    # byte literals per generated line
INDENT_UNIT = "    "        # one indent level in generated source

# Codec IDs (0=none, 1=deflate/zlib, 2=zstd)
CODEC_NONE = 0
CODEC_DEFLATE = 1
CODEC_ZSTD = 2

CODEC_NAMES = {
    "none": CODEC_NONE,
    "deflate": CODEC_DEFLATE,
    "zstd": CODEC_ZSTD,
}

DEFAULT_CODEC_ID = CODEC_NONE

# Generated module
DEFAULT_LOADER_NAME = "load"
GENERATED_HEADER = "# Code generated by embedfs. DO NOT EDIT."
