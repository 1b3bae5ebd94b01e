from __future__ import annotations

from typing import Dict, Iterable, List, Sequence

from ledger.ledger_model import BalanceSummary, CategoryTotal, MonthlyBucket, Transaction, TransactionType, parse_timestamp


def compute_balance_summary(transactions: Iterable[Transaction]) -> BalanceSummary:
    """
    Calculate income, expense, and balance totals for one month's transactions.

    Args:
        transactions: Transactions of a single bucket, in any order.
    Returns:
        BalanceSummary whose balance is total_income - total_expenses and whose
        is_overdue flag is set when that balance is negative.
    Assumptions:
        Function is pure; it is recomputed on every call and nothing is cached.
    """
    total_income = 0.0
    total_expenses = 0.0
    for transaction in transactions:
        if transaction.type == "income":
            total_income += transaction.amount
        elif transaction.type == "expense":
            total_expenses += transaction.amount

    balance = total_income - total_expenses
    return BalanceSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        balance=balance,
        is_overdue=balance < 0,
    )


def compute_category_breakdown(
    transactions: Iterable[Transaction],
    transaction_type: TransactionType,
) -> List[CategoryTotal]:
    """
    Group one type of transaction by its category label.

    Args:
        transactions: Transactions of a single bucket.
        transaction_type: Only transactions of this type are counted.
    Returns:
        One CategoryTotal per distinct category, in the order categories were first seen.
    Assumptions:
        Categories match exactly (case and whitespace are significant).
    """
    totals: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for transaction in transactions:
        if transaction.type != transaction_type:
            continue
        totals[transaction.category] = totals.get(transaction.category, 0.0) + transaction.amount
        counts[transaction.category] = counts.get(transaction.category, 0) + 1

    return [
        CategoryTotal(category=category, total=total, count=counts[category])
        for category, total in totals.items()
    ]


def compute_category_shares(
    transactions: Iterable[Transaction],
    transaction_type: TransactionType,
) -> Dict[str, float]:
    """
    Derive each category's share of the month's total for one transaction type.

    Returns:
        Dict mapping category labels to ratios that sum to 1 when the total is positive; empty dict otherwise.
    """
    breakdown = compute_category_breakdown(transactions, transaction_type)
    grand_total = sum(entry.total for entry in breakdown)
    if grand_total == 0:
        return {}

    return {entry.category: entry.total / grand_total for entry in breakdown}


def sort_by_date_desc(transactions: Sequence[Transaction]) -> List[Transaction]:
    """Most recent first; equal timestamps keep their insertion order (sorted() is stable)."""
    return sorted(transactions, key=lambda transaction: parse_timestamp(transaction.date), reverse=True)


def collect_categories(buckets: Iterable[MonthlyBucket], transaction_type: TransactionType) -> set[str]:
    return {
        transaction.category
        for bucket in buckets
        for transaction in bucket.transactions
        if transaction.type == transaction_type
    }
