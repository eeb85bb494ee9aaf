# api/settlement.py
"""Balance accounting and greedy debt settlement for a group of expenses."""

import heapq
import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
# Balances within one cent of zero count as settled
TOLERANCE = Decimal("0.01")
# Remainders closer than this are treated as equal when handing out stray cents
_REMAINDER_PRECISION = Decimal("0.000001")


def round_money(value):
    """Round to cents, halves away from zero (ROUND_HALF_UP on Decimal)."""
    rounded = to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)
    # -0.00 -> 0.00
    return rounded if rounded else abs(rounded)


def to_decimal(value):
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from turning into 0.1000000000000000055...
    return Decimal(str(value))


@dataclass(frozen=True)
class Expense:
    payer: str
    amount: Decimal
    participants: tuple = ()

    def group(self):
        # Duplicate names only get one share
        return tuple(dict.fromkeys(self.participants))


@dataclass(frozen=True)
class Settlement:
    debtor: str
    creditor: str
    amount: Decimal

    def to_dict(self):
        return {"from": self.debtor, "to": self.creditor, "amount": float(self.amount)}


def known_people(expenses, people=()):
    """Every identity in first-appearance order: roster, then payer before participants."""
    seen = dict.fromkeys(people)
    for expense in expenses:
        seen.setdefault(expense.payer)
        for person in expense.participants:
            seen.setdefault(person)
    return list(seen)


def compute_balances(expenses, people=()):
    """
    Reduce expenses to {person: net balance}, positive meaning the person is owed.

    The mapping keeps first-appearance order, which later decides ties when
    matching debtors to creditors. Balances are rounded to cents and then
    reconciled so they add up to exactly zero.

    A stray cent goes to whoever appears first among the equally rounded
    balances, usually the payer: 100 split between A, B and C gives
    A 66.66, B -33.33, C -33.33 rather than A 66.67.
    """
    everyone = known_people(expenses, people)
    raw = {person: Decimal(0) for person in everyone}

    # 1. Calculate Net Balances
    for expense in expenses:
        group = expense.group() or tuple(everyone)
        if not group:
            continue

        amount = to_decimal(expense.amount)
        share = amount / len(group)
        for person in group:
            raw[person] -= share
        raw[expense.payer] += amount

    # 2. Round to cents and hand back stray cents
    balances = {person: round_money(value) for person, value in raw.items()}
    _reconcile_cents(balances, raw)

    logger.debug("Computed %d balances from %d expenses", len(balances), len(expenses))
    return balances


def _reconcile_cents(balances, raw):
    # Rounding every balance on its own can leave the total a few cents off zero.
    # Take those cents back from the balances that were rounded furthest in the
    # same direction; on a tie the earlier person absorbs the cent.
    residual = sum(balances.values(), Decimal(0))
    cents = int(residual / CENT)
    if cents == 0:
        return

    order = list(balances)
    errors = {
        person: (balances[person] - raw[person]).quantize(_REMAINDER_PRECISION)
        for person in order
    }
    step = CENT if cents > 0 else -CENT
    sign = 1 if cents > 0 else -1
    position = {person: i for i, person in enumerate(order)}
    ranked = sorted(order, key=lambda person: (-sign * errors[person], position[person]))

    for person in ranked[:abs(cents)]:
        balances[person] -= step

    logger.debug("Reconciled %d stray cent(s) across balances", abs(cents))


def compute_settlements(balances):
    """
    Greedily pay the largest creditor from the largest debtor until one side runs out.

    Equal amounts are ordered by first appearance in ``balances``. This is a
    heuristic: it does not promise the fewest possible transactions.
    """
    # 1. Separate Debtors and Creditors
    debtors = []
    creditors = []

    for position, (person, amount) in enumerate(balances.items()):
        net = to_decimal(amount)
        if net < -TOLERANCE:
            debtors.append((net, position, person))
        elif net > TOLERANCE:
            creditors.append((-net, position, person))

    heapq.heapify(debtors)
    heapq.heapify(creditors)

    # 2. Match them up
    settlements = []
    while debtors and creditors:
        debt, debtor_position, debtor = heapq.heappop(debtors)
        credit, creditor_position, creditor = heapq.heappop(creditors)

        # both heaps store negated amounts so the largest pops first
        amount = min(-debt, -credit)
        settlements.append(Settlement(debtor, creditor, round_money(amount)))

        debt += amount
        credit += amount

        if -debt > TOLERANCE:
            heapq.heappush(debtors, (debt, debtor_position, debtor))
        if -credit > TOLERANCE:
            heapq.heappush(creditors, (credit, creditor_position, creditor))

    return settlements


def calculate_settlements(expenses, people=()):
    balances = compute_balances(expenses, people)
    return balances, compute_settlements(balances)


def format_settlement(settlement):
    return f"{settlement.debtor} -> {settlement.amount:.2f} -> {settlement.creditor}"


def settlements_to_text(settlements):
    if not settlements:
        return "All settled."
    return "\n".join(format_settlement(s) for s in settlements)
