"""
Tests for decoding web3 logs into pool events.
"""
from hexbytes import HexBytes

from vesper_revenue.services.events import DepositEvent, TransferEvent, WithdrawEvent, event_from_log


POOL = "0x0C49066C0808Ee8c673553B7cbd99BCC9ABf113d"
OWNER = "0xA30A689EC0F9D717C5BA1098455B031B868B720F"
TX = "0x" + "EF" * 32


def make_log(name, args, log_index=2):
    return {
        'event': name,
        'args': args,
        'address': POOL,
        'transactionHash': HexBytes(TX),
        'blockNumber': 12345,
        'logIndex': log_index,
    }


class TestEventFromLog:

    def test_withdraw(self):
        event = event_from_log(make_log('Withdraw', {'owner': OWNER, 'shares': 10**18, 'amount': 10**6}))

        assert isinstance(event, WithdrawEvent)
        assert event.pool_address == POOL.lower()
        assert event.owner == OWNER.lower()
        assert event.shares == 10**18
        assert event.tx_hash == TX.lower()
        assert event.block_number == 12345
        assert event.log_index == 2

    def test_deposit(self):
        event = event_from_log(make_log('Deposit', {'owner': OWNER, 'shares': 5, 'amount': 10**6}))

        assert isinstance(event, DepositEvent)
        assert event.amount == 10**6

    def test_transfer(self):
        event = event_from_log(make_log('Transfer', {'from': "0x" + "00" * 20, 'to': OWNER, 'value': 42}))

        assert isinstance(event, TransferEvent)
        assert event.from_address == "0x" + "00" * 20
        assert event.to_address == OWNER.lower()
        assert event.value == 42

    def test_string_tx_hash(self):
        log = make_log('Withdraw', {'owner': OWNER, 'shares': 1})
        log['transactionHash'] = TX

        assert event_from_log(log).tx_hash == TX.lower()

    def test_unknown_event_is_none(self):
        assert event_from_log(make_log('Approval', {'owner': OWNER})) is None
