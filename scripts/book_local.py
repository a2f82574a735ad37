#!/usr/bin/env python3
"""
Interactive terminal client for the clinic API.

Usage:
  uvicorn pawfessional.main:app --port 5000     # mock backend, in another shell
  python3 scripts/book_local.py

What it does:
- Restores the saved session or asks you to log in
- Shows upcoming appointments, history and the calendar
- Walks through the booking wizard (pet -> service -> schedule -> summary)
"""

from __future__ import annotations

import asyncio
import getpass
import sys
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

load_dotenv()

from pawfessional.application.exceptions import PawfessionalError, SelectionRequired  # noqa: E402
from pawfessional.application.use_cases.booking_wizard import BookingWizard  # noqa: E402
from pawfessional.core.config import settings  # noqa: E402
from pawfessional.core.logging import configure_logging  # noqa: E402
from pawfessional.domain.entities.phase import Phase  # noqa: E402
from pawfessional.domain.entities.service_catalog import SERVICE_CATALOG  # noqa: E402
from pawfessional.wiring import dependencies as deps  # noqa: E402


async def ask(prompt: str) -> str:
    return (await asyncio.to_thread(input, prompt)).strip()


def alert(title: str, message: str) -> None:
    print(f"\n[{title}] {message}")


def _print_header(title: str) -> None:
    print("\n" + title)
    print("-" * 60)


async def login_loop() -> bool:
    session = deps.get_session()
    while not session.is_authenticated:
        _print_header("Log in (blank email to quit)")
        email = await ask("email: ")
        if not email:
            return False
        password = await asyncio.to_thread(getpass.getpass, "password: ")
        try:
            await deps.get_login_use_case().execute(email, password)
        except PawfessionalError as e:
            alert(e.title, str(e))
    return True


async def show_dashboard() -> None:
    view = deps.get_dashboard_view()
    try:
        await view.refresh()
    except PawfessionalError as e:
        alert(e.title, str(e))
        return
    finally:
        view.detach()
    _print_header(f"{view.greeting}  [{view.avatar_initial}]")
    print(f"Upcoming appointments: {view.upcoming_count}")
    for a in view.upcoming:
        print(f"  #{a.id} {a.date_key} {a.appointment_time or ''}  {', '.join(a.services)}  ({a.status})")


async def show_history() -> None:
    view = deps.get_history_view()
    try:
        await view.refresh()
        choice = await ask("filter [All/Pending/Approved/Cancelled]: ") or "All"
        view.set_filter(choice.capitalize())
        _print_header(f"Appointment history ({view.filter})")
        for a in view.appointments:
            flag = " (cancellable)" if view.is_cancellable(a) else ""
            print(f"  #{a.id} {a.date_key} {a.appointment_time or ''}  {a.status}{flag}")
        target = await ask("cancel appointment # (blank to skip): ")
        if target:
            confirm = await ask("Are you sure you want to cancel this appointment? [y/N] ")
            if confirm.lower().startswith("y"):
                await view.cancel(int(target))
                alert("Success", "Appointment cancelled.")
    except ValueError as e:
        alert("Error", str(e))
    except PawfessionalError as e:
        alert(e.title, str(e))
    finally:
        view.detach()


async def show_calendar() -> None:
    view = deps.get_calendar_view()
    try:
        await view.refresh()
        day = await ask(f"date [{view.selected_date}]: ")
        if day:
            view.select_date(day)
    except ValueError as e:
        alert("Error", str(e))
    except PawfessionalError as e:
        alert(e.title, str(e))
    finally:
        view.detach()
    _print_header(f"Schedule for {view.selected_date}")
    print("Marked: " + ", ".join(sorted(view.marked_dates())))
    entries = view.entries_on_selected_date()
    if not entries:
        print("  No appointments or events.")
    for entry in entries:
        print(f"  {entry.time or '--:--'}  [{entry.kind}] {entry.title}")


async def run_phase(wizard: BookingWizard) -> None:
    if wizard.phase is Phase.SELECT_PET:
        for i, pet in enumerate(wizard.pets, 1):
            mark = "x" if pet.id in wizard.draft.pet_ids else " "
            print(f"  [{mark}] {i}. {pet.name} ({pet.species or '?'}, {pet.breed or '?'})")
        if not wizard.pets:
            print("  No pets found. Please add a pet in your profile first.")
        choice = await ask("toggle # / a=select all / n=next / b=back: ")
        if choice == "a":
            wizard.toggle_select_all_pets()
        elif choice.isdigit() and 0 < int(choice) <= len(wizard.pets):
            wizard.toggle_pet(wizard.pets[int(choice) - 1].id)
        else:
            return await _navigate(wizard, choice)
    elif wizard.phase is Phase.SELECT_SERVICE:
        for i, name in enumerate(SERVICE_CATALOG, 1):
            mark = "x" if name in wizard.draft.services else " "
            print(f"  [{mark}] {i}. {name}")
        choice = await ask("toggle # / n=next / b=back: ")
        if choice.isdigit() and 0 < int(choice) <= len(SERVICE_CATALOG):
            wizard.toggle_service(SERVICE_CATALOG[int(choice) - 1])
        else:
            return await _navigate(wizard, choice)
    elif wizard.phase is Phase.SCHEDULE:
        print(f"  date: {wizard.draft.date or '-'}  time: {wizard.draft.time or '-'}")
        print("  slots: " + " ".join(wizard.time_slots()))
        choice = await ask("d YYYY-MM-DD / t HH:MM / notes TEXT / n=next / b=back: ")
        if choice.startswith("d "):
            wizard.select_date(choice[2:].strip())
        elif choice.startswith("t "):
            wizard.select_time(choice[2:].strip())
        elif choice.startswith("notes "):
            wizard.set_notes(choice[6:].strip())
        else:
            return await _navigate(wizard, choice)
    else:
        summary = wizard.summary()
        print(f"  Pet(s):     {', '.join(summary.pets)}")
        print(f"  Service(s): {', '.join(summary.services)}")
        print(f"  Date:       {summary.date}")
        print(f"  Time:       {summary.time}")
        if summary.notes:
            print(f"  Notes:      {summary.notes}")
        choice = await ask("c=confirm booking / b=back: ")
        if choice == "c":
            result = await wizard.submit()
            if result.message:
                alert("Success", result.message)
                await asyncio.sleep(settings.CONFIRMATION_DELAY_SECONDS)
        else:
            await _navigate(wizard, choice)


async def _navigate(wizard: BookingWizard, choice: str) -> None:
    if choice == "n":
        wizard.next()
    elif choice == "b" and wizard.back() is None:
        await wizard.close()


async def book() -> None:
    wizard = deps.get_booking_wizard()
    try:
        await wizard.on_focus()
        if wizard.load_error:
            alert("Error", str(wizard.load_error))
        while not wizard.closed and not wizard.completed:
            _print_header(f"Book appointment: step {wizard.phase + 1}/4 {wizard.phase.title}")
            try:
                await run_phase(wizard)
            except SelectionRequired as e:
                alert(e.title, str(e))
            except PawfessionalError as e:
                alert(e.title, str(e))
    finally:
        await wizard.close()


async def main() -> None:
    configure_logging("WARNING")
    session = deps.get_session()
    if not session.has_seen_onboarding:
        _print_header("Welcome to Pawfessional: book vet visits for all your pets.")
        session.complete_onboarding()

    if not await login_loop():
        return

    channel = deps.get_realtime_channel()
    await channel.start()
    try:
        actions = {
            "1": show_dashboard,
            "2": book,
            "3": show_history,
            "4": show_calendar,
        }
        while session.is_authenticated:
            await show_dashboard()
            choice = await ask("\n1 dashboard  2 book  3 history  4 calendar  l logout  q quit: ")
            if choice == "q":
                break
            if choice == "l":
                deps.get_account_settings()[0].logout()
                if not await login_loop():
                    break
                continue
            action = actions.get(choice)
            if action is not None and action is not show_dashboard:
                await action()
    finally:
        await channel.stop()
        await deps.get_api_client().aclose()


if __name__ == "__main__":
    asyncio.run(main())
