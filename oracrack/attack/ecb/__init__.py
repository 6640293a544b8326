from .affixes import (
    detect_prefix_blocks_count,
    detect_prefix_len,
    detect_prefix_plus_suffix_len,
    detect_suffix_len,
)
from .byte_at_a_time import build_dict, ecb_oracle_attack, find_char_in_dict, recover_ecb_suffix
from .detection import detect_blocksize, detect_ecb, detect_encryption_mode, detect_padding, query
