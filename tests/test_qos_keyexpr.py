import pytest

from rosgraph_zenoh.qos_keyexpr import (
    DurabilityPolicy,
    Duration,
    HistoryPolicy,
    LivelinessPolicy,
    QosCompatibility,
    QosProfile,
    ReliabilityPolicy,
    check_compatible,
    demangle_name,
    keyexpr_to_qos,
    mangle_name,
    qos_to_keyexpr,
)

# A default that differs from the example profile in every field, so all are written.
DISTINCT_DEFAULT = QosProfile(
    history=HistoryPolicy.SYSTEM_DEFAULT,
    depth=0,
    reliability=ReliabilityPolicy.SYSTEM_DEFAULT,
    durability=DurabilityPolicy.SYSTEM_DEFAULT,
    deadline=Duration(99, 99),
    lifespan=Duration(99, 99),
    liveliness=LivelinessPolicy.SYSTEM_DEFAULT,
    liveliness_lease_duration=Duration(99, 99),
)

DOC_EXAMPLE = QosProfile(
    history=HistoryPolicy.KEEP_LAST,
    depth=10,
    reliability=ReliabilityPolicy.RELIABLE,
    durability=DurabilityPolicy.VOLATILE,
    deadline=Duration(0, 0),
    lifespan=Duration(60, 3000),
    liveliness=LivelinessPolicy.AUTOMATIC,
    liveliness_lease_duration=Duration(0, 0),
)


def test_documented_example_encoding():
    assert qos_to_keyexpr(DOC_EXAMPLE, DISTINCT_DEFAULT) == "1:2:1,10:0,0:60,3000:1,0,0"


def test_documented_example_decoding():
    assert keyexpr_to_qos("1:2:1,10:0,0:60,3000:1,0,0", DISTINCT_DEFAULT) == DOC_EXAMPLE


def test_default_profile_encodes_to_delimiters_only():
    default = QosProfile()
    encoded = qos_to_keyexpr(default, default)
    assert encoded == "::,:,:,:,,"
    assert keyexpr_to_qos(encoded, default) == default


@pytest.mark.parametrize(
    "qos",
    [
        QosProfile(),
        QosProfile(reliability=ReliabilityPolicy.BEST_EFFORT, depth=1),
        QosProfile(
            history=HistoryPolicy.KEEP_ALL,
            durability=DurabilityPolicy.TRANSIENT_LOCAL,
            deadline=Duration(5, 7),
        ),
        QosProfile(
            liveliness=LivelinessPolicy.MANUAL_BY_TOPIC,
            liveliness_lease_duration=Duration(3, 0),
            lifespan=Duration(0, 500),
        ),
        QosProfile(liveliness=LivelinessPolicy.BEST_AVAILABLE),
    ],
)
def test_round_trip_with_default(qos):
    default = QosProfile()
    assert keyexpr_to_qos(qos_to_keyexpr(qos, default), default) == qos
    assert keyexpr_to_qos(qos_to_keyexpr(qos)) == qos


def test_default_argument_is_used_when_omitted():
    qos = QosProfile(depth=3)
    assert qos_to_keyexpr(qos) == qos_to_keyexpr(qos, QosProfile())


def test_empty_fields_take_given_default():
    decoded = keyexpr_to_qos("::,:,:,:,,", DISTINCT_DEFAULT)
    assert decoded == DISTINCT_DEFAULT


@pytest.mark.parametrize(
    "keyexpr",
    [
        "1:2:1,10:0,0:60,3000",  # too few parts
        "1:2:1:0,0:60,3000:1,0,0",  # history without depth
        "1:2:1,10:0:60,3000:1,0,0",  # deadline without nsec
        "1:2:1,10:0,0:60:1,0,0",  # lifespan without nsec
        "1:2:1,10:0,0:60,3000:1,0",  # liveliness too short
    ],
)
def test_malformed_structure_is_rejected(keyexpr):
    with pytest.raises(ValueError):
        keyexpr_to_qos(keyexpr)


@pytest.mark.parametrize(
    "keyexpr",
    [
        "9::,:,:,:,,",  # unknown reliability value
        "4::,:,:,:,,",  # best-available reliability is not accepted
        ":4:,:,:,:,,",  # best-available durability is not accepted
        "::7,:,:,:,,",  # unknown history
        "::,:,:,:2,,",  # manual-by-node liveliness is not accepted
    ],
)
def test_unaccepted_policies_are_rejected(keyexpr):
    with pytest.raises(ValueError):
        keyexpr_to_qos(keyexpr)


@pytest.mark.parametrize(
    "keyexpr",
    [
        "::,x:,:,:,,",
        "::,10x:,:,:,,",
        "::,:,:,:,,abc",
        "::,99999999999999999999999:,:,:,,",
    ],
)
def test_bad_numbers_are_rejected(keyexpr):
    with pytest.raises(ValueError):
        keyexpr_to_qos(keyexpr)


def test_identical_profiles_are_compatible():
    assert check_compatible(QosProfile(), QosProfile()) is QosCompatibility.OK


def test_best_effort_publisher_with_reliable_subscription_is_error():
    pub = QosProfile(reliability=ReliabilityPolicy.BEST_EFFORT)
    sub = QosProfile(reliability=ReliabilityPolicy.RELIABLE)
    assert check_compatible(pub, sub) is QosCompatibility.ERROR
    assert check_compatible(sub, pub) is QosCompatibility.OK


def test_volatile_publisher_with_transient_subscription_is_error():
    pub = QosProfile(durability=DurabilityPolicy.VOLATILE)
    sub = QosProfile(durability=DurabilityPolicy.TRANSIENT_LOCAL)
    assert check_compatible(pub, sub) is QosCompatibility.ERROR


def test_system_default_reliability_gives_warning():
    pub = QosProfile(reliability=ReliabilityPolicy.SYSTEM_DEFAULT)
    sub = QosProfile(reliability=ReliabilityPolicy.RELIABLE)
    assert check_compatible(pub, sub) is QosCompatibility.WARNING


def test_deadline_compatibility():
    no_deadline = QosProfile()
    short = QosProfile(deadline=Duration(1, 0))
    long = QosProfile(deadline=Duration(2, 0))
    assert check_compatible(no_deadline, short) is QosCompatibility.ERROR
    assert check_compatible(long, short) is QosCompatibility.ERROR
    assert check_compatible(short, long) is QosCompatibility.OK
    assert check_compatible(short, no_deadline) is QosCompatibility.OK


def test_automatic_publisher_with_manual_subscription_is_error():
    pub = QosProfile(liveliness=LivelinessPolicy.AUTOMATIC)
    sub = QosProfile(liveliness=LivelinessPolicy.MANUAL_BY_TOPIC)
    assert check_compatible(pub, sub) is QosCompatibility.ERROR


def test_mangle_and_demangle():
    assert mangle_name("/talker/ns") == "%talker%ns"
    assert demangle_name("%talker%ns") == "/talker/ns"
    assert demangle_name(mangle_name("/a/b/c")) == "/a/b/c"
    assert mangle_name("plain") == "plain"