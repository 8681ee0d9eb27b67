MEMORY_SIZE = 2048  # words

WORD_BITS = 32
WORD_MIN = -(1 << (WORD_BITS - 1))
WORD_MAX = (1 << (WORD_BITS - 1)) - 1

DEFAULT_MAX_STEPS = 1_000_000
