import dataclasses
import re

import pytest

from proof_bridge.models import Failed, ProofRecord, Unverified, Verified
from proof_bridge.services.proofs.encoder import (
    SIMULATED_CLIENT,
    EncodingError,
    encode,
    format_hash,
    hex_fields,
    is_real_hash,
    to_response,
)
from proof_bridge.services.proofs.scoring import compute_score


def test_verified_outcome_gets_real_hash_and_prover_score(telemetry):
    record = encode(compute_score(10, 80), Verified(42), telemetry)
    assert record.is_real is True
    assert record.score == 42
    assert record.remaining_time == 40
    assert record.hash == '0xSP1_002a_000a_0050_REAL'
    assert is_real_hash(record.hash)


@pytest.mark.parametrize('outcome', [Unverified('no marker'), Failed('exit 1')])
def test_other_outcomes_keep_local_score_and_simulated_hash(telemetry, outcome):
    record = encode(compute_score(10, 80), outcome, telemetry)
    assert record.is_real is False
    assert record.score == 30
    assert re.fullmatch(r'0xSIM_001e_000a_0050_[0-9a-f]{8}', record.hash)
    assert not is_real_hash(record.hash)


def test_client_format_has_no_separators(telemetry):
    record = encode(compute_score(10, 80), Failed('unreachable'), telemetry, simulated_format=SIMULATED_CLIENT)
    assert re.fullmatch(r'0x001e000a0050[0-9a-f]{14}', record.hash)
    assert record.is_real is False


@pytest.mark.parametrize('fmt', ['server', 'client'])
def test_hex_segments_match_record_fields(telemetry, fmt):
    record = encode(compute_score(telemetry.moves, telemetry.elapsed_seconds), Failed('x'), telemetry,
                    simulated_format=fmt)
    assert hex_fields(record.hash) == (record.score, record.moves, record.elapsed_seconds)


def test_hex_fields_rejects_foreign_strings():
    assert hex_fields('0xdeadbeef') is None
    assert hex_fields('') is None


def test_out_of_range_values_are_encoding_faults():
    with pytest.raises(EncodingError):
        format_hash(-1, 0, 0, is_real=True)
    with pytest.raises(EncodingError):
        format_hash(0x10000, 0, 0, is_real=True)
    with pytest.raises(EncodingError):
        format_hash(1, 1, 1, is_real=False, simulated_format='bogus')


def test_response_shape(telemetry):
    record = encode(compute_score(10, 80), Verified(30), telemetry)
    body = to_response(record)
    assert body['success'] is True
    assert body['proofHash'] == record.hash
    assert body['calculatedScore'] == 30
    assert body['isRealProof'] is True
    assert body['gameData'] == {'moves': 10, 'time': 80, 'matchedPairs': 8}
    assert body['remainingTime'] == 40
    details = body['proofDetails']
    assert details['algorithm'] == 'SP1 ZK-STARK'
    assert details['verificationMethod'] == 'Real SP1 RISC-V zkVM'
    assert details['scoreFormula'] == 'Remaining Time - Moves'
    assert details['createdAt'].endswith('Z')


def test_records_are_immutable(telemetry):
    record = encode(compute_score(10, 80), Failed('x'), telemetry)
    assert isinstance(record, ProofRecord)
    with pytest.raises(dataclasses.FrozenInstanceError):
        record.score = 99
