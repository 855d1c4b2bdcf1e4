"""
Tests for the hashing service.
"""

import io

import pytest

from treesync.services.hashing import HashAlgorithm, HashingService


class TestHashingService:

    @pytest.mark.parametrize("algorithm, data, expected", [
        (HashAlgorithm.MD5, b"", "d41d8cd98f00b204e9800998ecf8427e"),
        (HashAlgorithm.SHA256, b"abc",
         "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"),
        (HashAlgorithm.XXH64, b"", "ef46db3751d8e999"),
    ])
    def test_known_digests(self, algorithm, data, expected):
        result = HashingService().hash_stream(io.BytesIO(data), algorithm)

        assert result.hash_hex == expected

    def test_default_is_xxh64(self):
        result = HashingService().hash_stream(io.BytesIO(b"x"))

        assert result.algorithm is HashAlgorithm.XXH64

    def test_chunk_size_does_not_change_digest(self):
        data = b"0123456789" * 100

        small = HashingService(chunk_size=7).hash_stream(io.BytesIO(data))
        large = HashingService().hash_stream(io.BytesIO(data))

        assert small.matches(large)
        assert small.size == len(data)

    def test_compare_streams(self):
        service = HashingService()

        assert service.compare_streams(io.BytesIO(b"same"), io.BytesIO(b"same"))
        assert not service.compare_streams(io.BytesIO(b"same"), io.BytesIO(b"diff"))

    def test_different_algorithms_do_not_match(self):
        service = HashingService()
        md5 = service.hash_stream(io.BytesIO(b"x"), HashAlgorithm.MD5)
        sha = service.hash_stream(io.BytesIO(b"x"), HashAlgorithm.SHA256)

        assert not md5.matches(sha)
