import json

from sonatalab.cipher.sbox import generate_sbox
from sonatalab.evaluation.avalanche import avalanche_trials
from sonatalab.evaluation.report import EvaluationReport
from sonatalab.evaluation.roundtrip import run_roundtrip_tests
from sonatalab.evaluation.sbox_analysis import (
    analyze_key_sbox,
    analyze_sbox,
    sbox_ddt_max,
    sbox_lat_max_abs,
)


def test_identity_sbox_is_poor():
    res = analyze_sbox(list(range(16)), label="identity")
    assert res.is_bijective
    assert res.ddt_max == 16
    assert res.lat_max_abs == 16
    assert res.fixed_points == 16
    assert res.differential_uniformity == "poor"
    assert res.linearity == "poor"


def test_present_sbox_is_optimal():
    present = [0xC, 0x5, 0x6, 0xB, 0x9, 0x0, 0xA, 0xD, 0x3, 0xE, 0xF, 0x8, 0x4, 0x7, 0x1, 0x2]
    assert sbox_ddt_max(present) == 4
    assert sbox_lat_max_abs(present) == 8
    assert analyze_sbox(present).differential_uniformity == "good"


def test_non_bijective_table_flagged():
    assert not analyze_sbox([0] * 16).is_bijective


def test_key_sbox_analysis():
    res = analyze_key_sbox("test1234")
    assert res.is_bijective
    assert res.table == list(generate_sbox("test1234"))
    assert 4 <= res.ddt_max <= 16
    assert "DDT_max" in res.summary()


def test_report_serializes():
    report = EvaluationReport(
        roundtrip_results=[run_roundtrip_tests(4, num_vectors=5)],
        avalanche_results=[avalanche_trials(4, trials=3)],
        sbox_result=analyze_key_sbox("k"),
    )
    d = report.to_dict()
    json.dumps(d)
    assert d["summary"]["roundtrip_all_pass"] is True
    assert d["sac"] == []
    text = report.to_summary()
    assert "Roundtrip Tests: 1/1" in text
    assert "S-box Analysis" in text
