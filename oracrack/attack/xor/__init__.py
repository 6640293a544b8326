from .frequency import (
    build_charstat_dict,
    crack_single_xor,
    crack_vigenere,
    do_single_xor,
    do_vigenere,
    do_xor,
    guess_key_size,
    hamming_distance,
    load_charstat_dict,
)
