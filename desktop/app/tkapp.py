"""Tkinter desktop application for the expense tracker."""

from __future__ import annotations

import argparse
import logging
import os
import tkinter as tk
from datetime import datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from tkinter import messagebox, simpledialog, ttk
from typing import Iterable, List, Optional

from tracker_core.events import BUDGET_CHANGED, EXPENSE_ADDED, EXPENSE_DELETED, Event
from tracker_core.exceptions import (
    ExportError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from tracker_core.models import ALL_CATEGORIES, Category, SortMode
from tracker_core.services import TrackerService, create_tracker

logger = logging.getLogger(__name__)

PRIMARY_BG = "#0f172a"
SECONDARY_BG = "#1e293b"
ACCENT_BG = "#1d4ed8"
ACCENT_ACTIVE_BG = "#2563eb"
TEXT_PRIMARY = "#e2e8f0"
TEXT_MUTED = "#94a3b8"
TEXT_DANGER = "#fca5a5"


def form_date(raw: Optional[str]) -> Optional[str]:
    """Date field text for the service; a blank field stamps the moment of saving."""
    text = (raw or "").strip()
    return text or None


def sanitize_amount_input(raw: str) -> str:
    if raw is None:
        return ""
    return raw.replace(",", "").replace("$", "").strip()


def format_amount_display(value: Decimal | str) -> str:
    if isinstance(value, Decimal):
        return f"${value:,.2f}"
    sanitized = sanitize_amount_input(value)
    if not sanitized:
        return ""
    try:
        amount = Decimal(sanitized)
    except InvalidOperation:
        return value.strip()
    return f"${amount:,.2f}"


class ExpenseTab(ttk.Frame):
    """Entry form plus the filtered, sorted expense list."""

    def __init__(self, master: tk.Misc, tracker: TrackerService) -> None:
        super().__init__(master, padding=16, style="Panel.TFrame")
        self.tracker = tracker

        self.name_var = tk.StringVar()
        self.amount_var = tk.StringVar()
        self.category_var = tk.StringVar(value=Category.default().value)
        self.date_var = tk.StringVar()

        # View criteria start from their defaults every session.
        self.filter_var = tk.StringVar(value=ALL_CATEGORIES)
        self.sort_var = tk.StringVar(value=SortMode.NEWEST_FIRST.value)

        self._build_form()
        self._build_table()
        self.columnconfigure(0, weight=1)
        self.rowconfigure(1, weight=1)

    def _build_form(self) -> None:
        form = ttk.LabelFrame(self, text="Add Expense", style="Card.TLabelframe")
        form.grid(row=0, column=0, sticky="ew", padx=4, pady=(0, 12))
        form.columnconfigure(0, weight=1)
        form.columnconfigure(1, weight=1)

        def add_field(label: str, var: tk.StringVar, column: int, row: int) -> ttk.Entry:
            ttk.Label(form, text=label, style="FormLabel.TLabel").grid(
                column=column, row=row, sticky="w", padx=4, pady=4
            )
            entry = ttk.Entry(form, textvariable=var, style="App.TEntry")
            entry.grid(column=column, row=row + 1, sticky="ew", padx=4, pady=(0, 8))
            return entry

        add_field("Expense Name", self.name_var, 0, 0)
        amount_entry = add_field("Amount", self.amount_var, 1, 0)
        amount_entry.bind("<FocusOut>", self._handle_amount_focus_out)

        ttk.Label(form, text="Category", style="FormLabel.TLabel").grid(
            column=0, row=2, sticky="w", padx=4, pady=4
        )
        ttk.Combobox(
            form,
            textvariable=self.category_var,
            values=Category.labels(),
            state="readonly",
            style="App.TCombobox",
        ).grid(column=0, row=3, sticky="ew", padx=4, pady=(0, 8))

        add_field("Date (YYYY-MM-DD, blank for now)", self.date_var, 1, 2)

        button_row = ttk.Frame(form, style="Panel.TFrame")
        button_row.grid(column=0, row=4, columnspan=2, sticky="e", padx=4, pady=4)
        ttk.Button(
            button_row,
            text="Reset",
            command=self.reset_form,
            style="Secondary.TButton",
        ).grid(column=0, row=0, padx=4)
        ttk.Button(
            button_row,
            text="Save Expense",
            command=self.submit,
            style="Primary.TButton",
        ).grid(column=1, row=0, padx=4)

    def _build_table(self) -> None:
        table_frame = ttk.Frame(self, style="Panel.TFrame")
        table_frame.grid(row=1, column=0, sticky="nsew")
        table_frame.columnconfigure(0, weight=1)
        table_frame.rowconfigure(1, weight=1)

        criteria = ttk.Frame(table_frame, style="Panel.TFrame")
        criteria.grid(row=0, column=0, columnspan=2, sticky="ew", pady=(0, 8))
        ttk.Label(criteria, text="Filter by Category", style="FormLabel.TLabel").grid(
            row=0, column=0, sticky="w", padx=4
        )
        filter_combo = ttk.Combobox(
            criteria,
            textvariable=self.filter_var,
            values=[ALL_CATEGORIES, *Category.labels()],
            state="readonly",
            style="App.TCombobox",
        )
        filter_combo.grid(row=0, column=1, sticky="w", padx=4)
        filter_combo.bind("<<ComboboxSelected>>", lambda _event: self.populate())

        ttk.Label(criteria, text="Sort By", style="FormLabel.TLabel").grid(
            row=0, column=2, sticky="w", padx=(16, 4)
        )
        sort_combo = ttk.Combobox(
            criteria,
            textvariable=self.sort_var,
            values=SortMode.labels(),
            state="readonly",
            style="App.TCombobox",
        )
        sort_combo.grid(row=0, column=3, sticky="w", padx=4)
        sort_combo.bind("<<ComboboxSelected>>", lambda _event: self.populate())

        columns = ("date", "name", "category", "amount")
        self.tree = ttk.Treeview(
            table_frame,
            columns=columns,
            show="headings",
            height=10,
            style="App.Treeview",
        )
        headings = {
            "date": "Date",
            "name": "Name",
            "category": "Category",
            "amount": "Amount",
        }
        for key, label in headings.items():
            width = 200 if key == "name" else 130
            self.tree.heading(key, text=label, anchor="w")
            self.tree.column(key, width=width, anchor="w")

        vsb = ttk.Scrollbar(table_frame, orient="vertical", command=self.tree.yview)
        self.tree.configure(yscroll=vsb.set)

        self.tree.grid(row=1, column=0, sticky="nsew")
        vsb.grid(row=1, column=1, sticky="ns")

        button_bar = ttk.Frame(table_frame, style="Panel.TFrame")
        button_bar.grid(row=2, column=0, columnspan=2, sticky="e", pady=8)
        ttk.Button(
            button_bar,
            text="Export Expenses as CSV",
            command=self.export,
            style="Secondary.TButton",
        ).grid(row=0, column=0, padx=4)
        ttk.Button(
            button_bar,
            text="Delete Selected",
            command=self.delete_selected,
            style="Secondary.TButton",
        ).grid(row=0, column=1, padx=4)

    def submit(self) -> None:
        errors = self._validate()
        if errors:
            # Keep the form filled in so the user can correct it.
            messagebox.showerror("Invalid Expense", "\n".join(errors), parent=self)
            return

        try:
            self.tracker.add_expense(
                self.name_var.get() or None,
                sanitize_amount_input(self.amount_var.get()),
                self.category_var.get(),
                form_date(self.date_var.get()),
            )
        except ValidationError as exc:
            messagebox.showerror("Invalid Expense", str(exc), parent=self)
            return
        except PersistenceError as exc:
            messagebox.showerror("Storage Error", str(exc), parent=self)
            return

        self.reset_form()

    def delete_selected(self) -> None:
        selection = self.tree.selection()
        if not selection:
            messagebox.showinfo("No selection", "Please select an expense to delete.", parent=self)
            return
        for item_id in selection:
            try:
                self.tracker.delete_expense(item_id)
            except RecordNotFoundError as exc:
                messagebox.showwarning("Not Found", str(exc), parent=self)
            except PersistenceError as exc:
                messagebox.showerror("Storage Error", str(exc), parent=self)
                break
        self.populate()

    def export(self) -> None:
        try:
            path = self.tracker.export_csv()
        except ExportError as exc:
            messagebox.showerror("Export Failed", str(exc), parent=self)
            return
        except PersistenceError as exc:
            messagebox.showerror("Storage Error", str(exc), parent=self)
            return
        messagebox.showinfo("Export Complete", f"Expenses exported to\n{path}", parent=self)

    def populate(self) -> None:
        try:
            expenses = self.tracker.list_view(self.filter_var.get(), self.sort_var.get())
        except PersistenceError as exc:
            # Leave the last rendered rows in place.
            messagebox.showerror("Storage Error", str(exc), parent=self)
            return
        self.tree.delete(*self.tree.get_children())
        for expense in expenses:
            values = (
                expense.date.astimezone().strftime("%Y-%m-%d") if expense.date else "-",
                expense.display_name,
                expense.category.value,
                format_amount_display(expense.amount),
            )
            self.tree.insert("", "end", iid=expense.id, values=values)

    def reset_form(self) -> None:
        self.name_var.set("")
        self.amount_var.set("")
        self.category_var.set(Category.default().value)
        self.date_var.set("")

    def _handle_amount_focus_out(self, _event: object) -> None:
        self.amount_var.set(format_amount_display(self.amount_var.get()))

    def _validate(self) -> List[str]:
        errors: List[str] = []

        amount_text = sanitize_amount_input(self.amount_var.get())
        if not amount_text:
            errors.append("Amount is required.")
        else:
            try:
                amount_value = Decimal(amount_text)
            except InvalidOperation:
                errors.append("Amount must be a number.")
            else:
                if not amount_value.is_finite() or amount_value < 0:
                    errors.append("Amount must be zero or greater.")

        date_text = self.date_var.get().strip()
        if date_text:
            try:
                datetime.strptime(date_text, "%Y-%m-%d")
            except ValueError:
                errors.append("Date must use the YYYY-MM-DD format.")

        return errors


class ExpenseTrackerApp(tk.Tk):
    """Main application window."""

    def __init__(self, data_dir: Path, export_dir: Optional[Path] = None) -> None:
        super().__init__()
        self.title("Expense Tracker")
        self.geometry("960x680")
        self.minsize(820, 560)
        self.configure(bg=PRIMARY_BG)

        self._configure_styles()

        self.tracker = create_tracker(data_dir, export_dir)

        self.budget_var = tk.StringVar(value="$0.00")
        self.spent_var = tk.StringVar(value="$0.00")
        self.remaining_var = tk.StringVar(value="$0.00")
        self.progress_var = tk.DoubleVar(value=0.0)

        self._build_layout()

        for name in (EXPENSE_ADDED, EXPENSE_DELETED, BUDGET_CHANGED):
            self.tracker.events.subscribe(name, self._on_event)
        self.refresh_all()

    def _configure_styles(self) -> None:
        style = ttk.Style(self)
        try:
            style.theme_use("clam")
        except tk.TclError:
            pass

        style.configure("TFrame", background=PRIMARY_BG)
        style.configure("TLabel", background=PRIMARY_BG, foreground=TEXT_PRIMARY)

        style.configure("Panel.TFrame", background=SECONDARY_BG, relief="flat")
        style.configure("Card.TLabelframe", background=SECONDARY_BG, foreground=TEXT_PRIMARY)
        style.configure("Card.TLabelframe.Label", background=SECONDARY_BG, foreground=TEXT_PRIMARY)
        style.configure("Header.TFrame", background=PRIMARY_BG)
        style.configure("Summary.TFrame", background=SECONDARY_BG)
        style.configure("Metric.TFrame", background=SECONDARY_BG)

        style.configure("FormLabel.TLabel", background=SECONDARY_BG, foreground=TEXT_MUTED, font=("Segoe UI", 9))
        style.configure("Header.TLabel", background=PRIMARY_BG, foreground=TEXT_PRIMARY, font=("Segoe UI", 20, "bold"))
        style.configure("MetricLabel.TLabel", background=SECONDARY_BG, foreground=TEXT_MUTED, font=("Segoe UI", 9, "bold"))
        style.configure("MetricValue.TLabel", background=SECONDARY_BG, foreground=TEXT_PRIMARY, font=("Segoe UI", 16, "bold"))
        style.configure(
            "MetricValueNegative.TLabel",
            background=SECONDARY_BG,
            foreground=TEXT_DANGER,
            font=("Segoe UI", 16, "bold"),
        )
        style.configure(
            "Budget.Horizontal.TProgressbar",
            troughcolor=PRIMARY_BG,
            background=ACCENT_BG,
            bordercolor=SECONDARY_BG,
        )
        style.configure(
            "OverBudget.Horizontal.TProgressbar",
            troughcolor=PRIMARY_BG,
            background="#f87171",
            bordercolor=SECONDARY_BG,
        )

        style.configure(
            "App.TEntry",
            fieldbackground=SECONDARY_BG,
            background=SECONDARY_BG,
            foreground=TEXT_PRIMARY,
            insertcolor=TEXT_PRIMARY,
            bordercolor=ACCENT_BG,
        )
        style.configure(
            "App.TCombobox",
            fieldbackground=SECONDARY_BG,
            background=SECONDARY_BG,
            foreground=TEXT_PRIMARY,
            arrowcolor=TEXT_PRIMARY,
        )
        style.map(
            "App.TCombobox",
            fieldbackground=[("readonly", SECONDARY_BG)],
            foreground=[("disabled", TEXT_MUTED)],
        )

        style.configure(
            "Primary.TButton",
            background=ACCENT_BG,
            foreground=TEXT_PRIMARY,
            bordercolor=ACCENT_BG,
            padding=(18, 6),
        )
        style.map("Primary.TButton", background=[("active", ACCENT_ACTIVE_BG)])

        style.configure(
            "Secondary.TButton",
            background=SECONDARY_BG,
            foreground=TEXT_PRIMARY,
            bordercolor=SECONDARY_BG,
            padding=(14, 6),
        )
        style.map("Secondary.TButton", background=[("active", ACCENT_BG)])

        style.configure(
            "App.Treeview",
            background=SECONDARY_BG,
            fieldbackground=SECONDARY_BG,
            foreground=TEXT_PRIMARY,
            bordercolor=SECONDARY_BG,
            rowheight=28,
        )
        style.configure(
            "App.Treeview.Heading",
            background=SECONDARY_BG,
            foreground=TEXT_MUTED,
            relief="flat",
        )
        style.map(
            "App.Treeview",
            background=[("selected", ACCENT_BG)],
            foreground=[("selected", TEXT_PRIMARY)],
        )

    def _build_layout(self) -> None:
        self.columnconfigure(0, weight=1)
        self.rowconfigure(2, weight=1)

        header = ttk.Frame(self, padding=20, style="Header.TFrame")
        header.grid(row=0, column=0, sticky="ew")
        ttk.Label(header, text="Expense Tracker", style="Header.TLabel").grid(row=0, column=0, sticky="w")

        summary = ttk.Frame(self, padding=(20, 10), style="Summary.TFrame")
        summary.grid(row=1, column=0, sticky="ew")
        summary.columnconfigure((0, 1, 2), weight=1)

        def build_metric(column: int, label: str, var: tk.StringVar) -> ttk.Label:
            container = ttk.Frame(summary, style="Metric.TFrame", padding=(16, 12))
            container.grid(row=0, column=column, sticky="ew", padx=6)
            ttk.Label(container, text=label, style="MetricLabel.TLabel").grid(row=0, column=0, sticky="w")
            value_label = ttk.Label(container, textvariable=var, style="MetricValue.TLabel")
            value_label.grid(row=1, column=0, sticky="w")
            return value_label

        build_metric(0, "Monthly Budget", self.budget_var)
        self.spent_label = build_metric(1, "Spent", self.spent_var)
        self.remaining_label = build_metric(2, "Remaining", self.remaining_var)

        progress_row = ttk.Frame(summary, style="Summary.TFrame")
        progress_row.grid(row=1, column=0, columnspan=3, sticky="ew", padx=6, pady=(8, 0))
        progress_row.columnconfigure(0, weight=1)
        self.progress_bar = ttk.Progressbar(
            progress_row,
            variable=self.progress_var,
            maximum=1.0,
            style="Budget.Horizontal.TProgressbar",
        )
        self.progress_bar.grid(row=0, column=0, sticky="ew")
        ttk.Button(
            progress_row,
            text="Set Budget",
            command=self._prompt_set_budget,
            style="Secondary.TButton",
        ).grid(row=0, column=1, padx=(12, 0))

        self.expense_tab = ExpenseTab(self, self.tracker)
        self.expense_tab.grid(row=2, column=0, sticky="nsew", padx=20, pady=12)

    def _on_event(self, event: Event) -> None:
        logger.debug("Refreshing after %s", event.name)
        self.refresh_all()

    def refresh_all(self) -> None:
        self.expense_tab.populate()
        self.refresh_summary()

    def refresh_summary(self) -> None:
        try:
            status = self.tracker.budget_status()
        except PersistenceError as exc:
            messagebox.showerror("Storage Error", str(exc), parent=self)
            return
        self.budget_var.set(format_amount_display(status.budget))
        self.spent_var.set(format_amount_display(status.spent))
        self.remaining_var.set(format_amount_display(status.remaining))
        self.progress_var.set(status.progress)
        if status.over_budget:
            self.spent_label.configure(style="MetricValueNegative.TLabel")
            self.remaining_label.configure(style="MetricValueNegative.TLabel")
            self.progress_bar.configure(style="OverBudget.Horizontal.TProgressbar")
        else:
            self.spent_label.configure(style="MetricValue.TLabel")
            self.remaining_label.configure(style="MetricValue.TLabel")
            self.progress_bar.configure(style="Budget.Horizontal.TProgressbar")

    def _prompt_set_budget(self) -> None:
        raw = simpledialog.askstring(
            "Set Monthly Budget",
            "Enter Budget:",
            initialvalue=str(self.tracker.get_budget()),
            parent=self,
        )
        if raw is None:
            return
        try:
            self.tracker.set_budget(sanitize_amount_input(raw))
        except ValidationError as exc:
            messagebox.showerror("Invalid Budget", str(exc), parent=self)
        except PersistenceError as exc:
            messagebox.showerror("Storage Error", str(exc), parent=self)


def main(argv: Optional[Iterable[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Tkinter desktop app for the expense tracker")
    parser.add_argument(
        "--data-dir",
        default=os.getenv("EXPENSE_TRACKER_DATA_DIR", "data"),
        type=Path,
        help="Directory containing JSON storage files (default: ./data)",
    )
    parser.add_argument(
        "--export-dir",
        type=Path,
        help="Directory for exported CSV files (default: <data-dir>/exports)",
    )
    args = parser.parse_args(list(argv) if argv is not None else None)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    app = ExpenseTrackerApp(args.data_dir, args.export_dir)
    app.mainloop()


if __name__ == "__main__":  # pragma: no cover - manual execution
    main()
