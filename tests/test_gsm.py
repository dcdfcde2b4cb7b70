import pytest

from antifurto.gsm import (
    GsmModem,
    SignalQuality,
    classify_signal,
    is_registered,
    parse_rssi,
)


class FakePort:
    def __init__(self, responses=()):
        self.responses = list(responses)
        self.writes = []
        self.reads = []

    def write(self, data):
        self.writes.append(bytes(data))

    def read(self, max_bytes, timeout):
        self.reads.append((max_bytes, timeout))
        if not self.responses:
            return b""
        return self.responses.pop(0)[:max_bytes]


def make_modem(responses=()):
    port = FakePort(responses)
    sleeps = []
    return GsmModem(port, sleep=sleeps.append), port, sleeps


@pytest.mark.parametrize(
    "response, expected",
    [
        ("\r\n+CREG: 0,1\r\n\r\nOK\r\n", True),
        ("\r\n+CREG: 0,5\r\n\r\nOK\r\n", True),
        ("\r\n+CREG: 0,2\r\n\r\nOK\r\n", False),
        ("", False),
    ],
)
def test_is_registered(response, expected):
    assert is_registered(response) is expected


def test_parse_rssi():
    assert parse_rssi("\r\n+CSQ: 17,0\r\n\r\nOK\r\n") == 17
    assert parse_rssi("+CSQ: 5,0") == 5
    assert parse_rssi("ERROR") is None


def test_classify_signal():
    assert classify_signal(99) is SignalQuality.UNKNOWN
    assert classify_signal(10) is SignalQuality.ACCEPTABLE
    assert classify_signal(9) is SignalQuality.WEAK


def test_send_sms_command_sequence():
    modem, port, _ = make_modem(
        [b"OK", b"+CSQ: 20,0", b"+CREG: 0,1", b"OK", b"> ", b"+CMGS: 1 OK"]
    )
    modem.send_sms("12345", "Alert")
    assert port.writes == [
        b"AT\r",
        b"AT+CSQ\r",
        b"AT+CREG?\r",
        b"AT+CMGF=1\r",
        b'AT+CMGS="12345"\r',
        b"Alert",
        b"\x1a",
    ]


def test_send_sms_without_network_raises():
    modem, port, sleeps = make_modem([b"OK", b"OK"])
    with pytest.raises(ConnectionError):
        modem.send_sms("12345", "Alert")
    assert port.writes.count(b"AT+CREG?\r") == 10
    assert len(sleeps) == 10


def test_send_sms_without_prompt_raises():
    modem, port, _ = make_modem([b"OK", b"OK", b"+CREG: 0,5", b"OK", b"ERROR"])
    with pytest.raises(TimeoutError):
        modem.send_sms("12345", "Alert")
    assert b"Alert" not in port.writes


def test_wait_for_prompt():
    modem, _, _ = make_modem([b"\r\n> "])
    assert modem.wait_for_prompt() is True
    assert modem.wait_for_prompt() is False


def test_init_registers():
    modem, port, _ = make_modem([b"OK", b"+CPIN: READY", b"+CREG: 0,1"])
    modem.init()
    assert modem.network_registered is True
    assert port.writes == [b"AT\r", b"AT+CPIN?\r", b"AT+CREG?\r"]


def test_init_retries_at_then_checks_sim():
    modem, port, _ = make_modem([b"", b"", b"", b"+CPIN: READY", b"+CREG: 0,5"])
    modem.init()
    assert port.writes[:4] == [b"AT\r", b"AT\r", b"AT\r", b"AT+CPIN?\r"]


def test_init_sim_not_ready_raises():
    modem, _, _ = make_modem([b"OK", b"+CPIN: SIM PIN"])
    with pytest.raises(ConnectionError):
        modem.init()


def test_init_registration_timeout_raises():
    modem, port, _ = make_modem([b"OK", b"+CPIN: READY"])
    with pytest.raises(ConnectionError):
        modem.init()
    assert port.writes.count(b"AT+CREG?\r") == 15
    assert modem.network_registered is False


def test_check_registration_updates_and_keeps_flag():
    modem, _, _ = make_modem([b"+CREG: 0,1", b"", b"+CREG: 0,2"])
    assert modem.check_registration() is True
    assert modem.check_registration() is True
    assert modem.check_registration() is False


def test_check_signal():
    modem, port, _ = make_modem([b"\r\n+CSQ: 17,0\r\n"])
    assert modem.check_signal() == 17
    assert port.writes == [b"AT+CSQ\r"]


def test_check_signal_timeout():
    modem, _, _ = make_modem()
    with pytest.raises(TimeoutError):
        modem.check_signal()


def test_list_operators():
    reply = b'+COPS: (2,"OPER","OP","00101")'
    modem, port, _ = make_modem([reply])
    assert modem.list_operators() == reply.decode()
    assert port.writes == [b"AT+COPS=?\r"]
    assert port.reads == [(511, 30.0)]


def test_list_operators_timeout():
    modem, _, _ = make_modem()
    with pytest.raises(TimeoutError):
        modem.list_operators()