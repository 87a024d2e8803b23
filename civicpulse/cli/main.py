import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import typer
from rich.console import Console
from rich.table import Table

from civicpulse.providers.settings import get_settings

app = typer.Typer(help="CLI for submitting and following civic issue complaints")
console = Console()

STATUS_STYLES = {
    "pending": "red",
    "in-progress": "yellow",
    "resolved": "green",
}

TokenOption = typer.Option(
    ..., "--token", envvar="CIVICPULSE_TOKEN", help="Bearer token issued by the identity provider"
)


def _api_url() -> str:
    return get_settings().civicpulse_api_url.rstrip("/")


def _request(method: str, path: str, token: str, **kwargs) -> Any:
    """
    Call the API and return the decoded JSON body.

    Exits with status 1 after printing the API error message when the call fails.
    """
    try:
        response = httpx.request(
            method,
            f"{_api_url()}{path}",
            headers={"Authorization": f"Bearer {token}"},
            timeout=30.0,
            **kwargs,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        try:
            message = e.response.json().get("message", e.response.text)
        except ValueError:
            message = e.response.text
        console.print(f"[bold red]Error {e.response.status_code}: {message}")
        raise typer.Exit(code=1)
    except httpx.HTTPError as e:
        console.print(f"[bold red]Could not reach the API at {_api_url()}: {e}")
        raise typer.Exit(code=1)
    if response.status_code == httpx.codes.NO_CONTENT:
        return None
    return response.json()


def _print_complaint(complaint: Dict[str, Any]) -> None:
    status_style = STATUS_STYLES.get(complaint["status"], "white")
    console.print(f"\n[bold]{complaint['title'] or complaint['category']}[/] ([cyan]{complaint['id']}[/])")
    console.print(f"Category: [cyan]{complaint['category']}[/]  Urgency: [cyan]{complaint['urgency']}[/]")
    console.print(f"Authority: [cyan]{complaint['authority_name']}[/]")
    console.print(f"Location: [cyan]{complaint['location_label']}[/] "
                  f"({complaint['latitude']:.5f}, {complaint['longitude']:.5f})")
    console.print(f"Status: [{status_style}]{complaint['status_label']}[/]  Votes: [cyan]{complaint['votes']}[/]")
    if complaint.get("assigned_to"):
        console.print(f"Assigned to: [cyan]{complaint['assigned_to']}[/]")
    for comment in complaint.get("comments", []):
        console.print(f"  💬 {comment}")


def _complaints_table(complaints: List[Dict[str, Any]]) -> Table:
    table = Table(show_header=True, header_style="bold green")
    table.add_column("ID")
    table.add_column("Category")
    table.add_column("Title")
    table.add_column("Location")
    table.add_column("Status")
    table.add_column("Votes", justify="right")
    table.add_column("Created")

    for complaint in complaints:
        style = STATUS_STYLES.get(complaint["status"], "white")
        table.add_row(
            complaint["id"][:8],
            complaint["category"],
            complaint["title"] or "-",
            complaint["location_label"],
            f"[{style}]{complaint['status_label']}[/]",
            str(complaint["votes"]),
            complaint["created_at"][:16].replace("T", " "),
        )
    return table


@app.command()
def submit(
    category: str = typer.Option(..., help="Pothole, Garbage, Streetlight, Waterlogging or Other"),
    authority: str = typer.Option("muni-1", help="Authority id (muni-1, roads-1, parks-1)"),
    title: str = typer.Option("", help="Short title"),
    description: str = typer.Option("", help="Issue description"),
    urgency: str = typer.Option("Low", help="Low, Medium or High"),
    coordinates: Optional[str] = typer.Option(None, help="Position as 'lat,lng'"),
    address: Optional[str] = typer.Option(None, help="Address to geocode when no coordinates are given"),
    photo: Optional[List[Path]] = typer.Option(None, exists=True, dir_okay=False, help="Photo file (repeatable)"),
    audio: Optional[Path] = typer.Option(None, exists=True, dir_okay=False, help="Audio note"),
    token: str = TokenOption,
):
    """
    Submit a new complaint.
    """
    form = {
        "category": category,
        "authority": authority,
        "title": title,
        "description": description,
        "urgency": urgency,
        "address": address or "",
    }
    if coordinates:
        form["coordinates"] = coordinates

    files = []
    for path in photo or []:
        mime_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        files.append(("photos", (path.name, path.read_bytes(), mime_type)))
    if audio:
        mime_type = mimetypes.guess_type(audio.name)[0] or "application/octet-stream"
        files.append(("audio", (audio.name, audio.read_bytes(), mime_type)))

    with console.status("[bold green]Submitting complaint..."):
        complaint = _request("POST", "/complaints", token, data=form, files=files or None)

    console.print("[green]Complaint submitted.")
    _print_complaint(complaint)


@app.command(name="list")
def list_complaints(
    mine: bool = typer.Option(False, help="Only my complaints"),
    status: Optional[str] = typer.Option(None, help="pending, in-progress or resolved"),
    category: Optional[str] = typer.Option(None, help="Filter by category"),
    near: Optional[str] = typer.Option(None, help="Centre as 'lat,lng'"),
    radius_km: Optional[float] = typer.Option(None, help="Radius around --near in km"),
    limit: int = typer.Option(50, help="Maximum number of complaints"),
    token: str = TokenOption,
):
    """
    List complaints, newest first.
    """
    params: Dict[str, Any] = {"mine": mine, "limit": limit}
    if status:
        params["status"] = status
    if category:
        params["category"] = category
    if near:
        params["near"] = near
    if radius_km is not None:
        params["radius_km"] = radius_km

    with console.status("[bold green]Fetching complaints..."):
        data = _request("GET", "/complaints", token, params=params)

    if not data["complaints"]:
        console.print("[yellow]No complaints found.")
        return

    console.print(_complaints_table(data["complaints"]))
    console.print(f"Showing {len(data['complaints'])} of {data['total']}")


@app.command()
def show(
    complaint_id: str = typer.Argument(..., help="Complaint id"),
    token: str = TokenOption,
):
    """
    Show one complaint with its comments.
    """
    _print_complaint(_request("GET", f"/complaints/{complaint_id}", token))


@app.command()
def upvote(
    complaint_id: str = typer.Argument(..., help="Complaint id"),
    token: str = TokenOption,
):
    """
    Add a vote to a complaint.
    """
    complaint = _request("POST", f"/complaints/{complaint_id}/upvote", token)
    if complaint is None:
        console.print(f"[yellow]No complaint {complaint_id}; nothing changed.")
        return
    console.print(f"[green]Votes: [bold]{complaint['votes']}[/]")


@app.command()
def comment(
    complaint_id: str = typer.Argument(..., help="Complaint id"),
    text: str = typer.Argument(..., help="Comment text"),
    token: str = TokenOption,
):
    """
    Comment on a complaint.
    """
    complaint = _request("POST", f"/complaints/{complaint_id}/comments", token, json={"text": text})
    console.print(f"[green]{len(complaint['comments'])} comment(s) on {complaint_id}")


@app.command()
def geocode(
    query: str = typer.Argument(..., help="Address to look up"),
    token: str = TokenOption,
):
    """
    Look up candidate positions for an address.
    """
    with console.status(f"[bold green]Geocoding [cyan]{query}[/]..."):
        data = _request("GET", "/geocode", token, params={"q": query})

    if not data["candidates"]:
        console.print(f"[yellow]No location found for '{query}'.")
        raise typer.Exit(code=1)

    table = Table(show_header=True, header_style="bold green")
    table.add_column("#")
    table.add_column("Label")
    table.add_column("Latitude", justify="right")
    table.add_column("Longitude", justify="right")
    for i, candidate in enumerate(data["candidates"]):
        table.add_row(
            str(i + 1) + (" ✓" if i == 0 else ""),
            candidate["label"],
            f"{candidate['latitude']:.6f}",
            f"{candidate['longitude']:.6f}",
        )
    console.print(table)


@app.command()
def status(
    complaint_id: str = typer.Argument(..., help="Complaint id"),
    new_status: str = typer.Argument(..., help="pending, in-progress or resolved"),
    token: str = TokenOption,
):
    """
    Change the status of a complaint (admin).
    """
    complaint = _request(
        "PATCH", f"/admin/complaints/{complaint_id}/status", token, json={"status": new_status}
    )
    style = STATUS_STYLES.get(complaint["status"], "white")
    console.print(f"[green]Status is now [{style}]{complaint['status_label']}[/]")


@app.command()
def assign(
    complaint_id: str = typer.Argument(..., help="Complaint id"),
    assignee: str = typer.Argument("", help="Officer or team; empty to unassign"),
    token: str = TokenOption,
):
    """
    Assign a complaint (admin).
    """
    complaint = _request(
        "PATCH", f"/admin/complaints/{complaint_id}/assign", token, json={"assigned_to": assignee}
    )
    console.print(f"[green]Assigned to [bold]{complaint['assigned_to'] or 'nobody'}[/]")


@app.command()
def analytics(token: str = TokenOption):
    """
    Complaint counts by status and category (admin).
    """
    data = _request("GET", "/admin/analytics", token)

    console.print(f"\n[bold]Total complaints:[/] [cyan]{data['total']}[/]  "
                  f"[bold]Total votes:[/] [cyan]{data['total_votes']}[/]")

    for title, counts in (("Status", data["by_status"]), ("Category", data["by_category"]),
                          ("Authority", data["by_authority"])):
        table = Table(show_header=True, header_style="bold green")
        table.add_column(title)
        table.add_column("Complaints", justify="right")
        for key, count in counts.items():
            table.add_row(key, str(count))
        console.print(table)


if __name__ == "__main__":
    app()
