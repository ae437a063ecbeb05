"""Integration tests for end-to-end workflows."""

import re

from tourops.cli.main import cli


def test_full_workflow(cli_runner, temp_db):
    """Test complete workflow: lookups → master data → proposal → confirm → vouchers."""
    db_args = ["--db-path", temp_db.database_path]

    # Step 1: Initialize lookups and sources
    result = cli_runner.invoke(cli, [*db_args, "init-lookups"])
    assert result.exit_code == 0

    # Step 2: Master data
    result = cli_runner.invoke(
        cli, [*db_args, "destination", "create", "IST", "Istanbul", "--country", "Turkey"]
    )
    assert result.exit_code == 0
    result = cli_runner.invoke(
        cli, [*db_args, "hotel", "create", "Pera Palace", "--destination", "Istanbul", "--stars", "5"]
    )
    assert result.exit_code == 0
    hotel_id = None
    for line in result.output.split("\n"):
        if "ID:" in line:
            # Extract hotel ID from output like "Created hotel 'Pera Palace' (ID: 1)"
            hotel_id = line.split("ID:")[1].strip().rstrip(")")
            break
    assert hotel_id is not None

    result = cli_runner.invoke(
        cli,
        [
            *db_args,
            "agency",
            "create",
            "Sunrise Travel",
            "--country",
            "Jordan",
            "--commission-rate",
            "10",
        ],
    )
    assert result.exit_code == 0

    # Step 3: Draft a proposal on the agency channel
    result = cli_runner.invoke(
        cli,
        [
            *db_args,
            "proposal",
            "create",
            "--source",
            "Travel Agency (B2B)",
            "--agency",
            "Sunrise Travel",
            "--destination",
            "Istanbul",
            "--margin",
            "20",
            "--commission",
            "0",
        ],
    )
    assert result.exit_code == 0
    reference = re.search(r"Created proposal (\S+)", result.output).group(1)

    # Step 4: Add line items
    item_args = [
        ("hotel", ["hotel_id=" + hotel_id, "checkin=2024-09-10", "checkout=2024-09-12",
                   "num_rooms=1", "price_per_night=150"]),
        ("transportation", ["vehicle_type=Van (7 PAX)", "num_days=2", "num_vehicles=1",
                            "price_per_day=60"]),
        ("additional", ["service_type=Tour Guide", "num_days=1", "num_people=3",
                        "price_per_day=$20"]),
    ]
    for category, assignments in item_args:
        args = [*db_args, "proposal", "item", "add", reference, category]
        for assignment in assignments:
            args.extend(["--set", assignment])
        result = cli_runner.invoke(cli, args)
        assert result.exit_code == 0, result.output

    # Step 5: Show the priced proposal (300 + 120 + 60 = 480, +20% = 576)
    result = cli_runner.invoke(cli, [*db_args, "proposal", "show", reference])
    assert result.exit_code == 0
    assert "Agency: Sunrise Travel" in result.output
    assert "480.00" in result.output
    assert "576.00" in result.output

    # Step 6: Confirm and work the vouchers
    result = cli_runner.invoke(cli, [*db_args, "proposal", "confirm", reference])
    assert result.exit_code == 0
    assert f"{reference}-V03" in result.output

    voucher = f"{reference}-V02"
    result = cli_runner.invoke(cli, [*db_args, "voucher", "status", voucher, "PAID"])
    assert result.exit_code == 0
    result = cli_runner.invoke(
        cli, [*db_args, "voucher", "guest", "add", voucher, "--first-name", "Rania"]
    )
    assert result.exit_code == 0

    result = cli_runner.invoke(cli, [*db_args, "voucher", "show", voucher])
    assert "Agency: Sunrise Travel" in result.output
    assert "vehicle_type: Van (7 PAX)" in result.output
    assert "total_price: 120.00" in result.output
    assert "Guests (1):" in result.output

    # Step 7: Cancelling the proposal leaves vouchers untouched
    result = cli_runner.invoke(cli, [*db_args, "proposal", "cancel", reference])
    assert result.exit_code == 0
    result = cli_runner.invoke(cli, [*db_args, "voucher", "list", "--status", "PAID"])
    assert voucher in result.output


def test_dangling_references_show_unknown(cli_runner, temp_db, proposal_service, master_data):
    """Test a proposal whose agency was deleted still shows and updates."""
    proposal = proposal_service.create_proposal(
        source_id=master_data["b2b"],
        destination_ids=[master_data["istanbul"]],
        agency_id=master_data["agency"],
    )
    db_args = ["--db-path", temp_db.database_path]

    result = cli_runner.invoke(cli, [*db_args, "agency", "delete", "Sunrise Travel", "--yes"])
    assert result.exit_code == 0

    result = cli_runner.invoke(cli, [*db_args, "proposal", "show", proposal.reference])
    assert result.exit_code == 0
    assert "Agency: Unknown" in result.output

    result = cli_runner.invoke(
        cli, [*db_args, "proposal", "update", proposal.reference, "--nights", "4"]
    )
    assert result.exit_code == 0


def test_log_level_option_emits_info(cli_runner, temp_db, master_data):
    """Test --log-level INFO shows service log records on stderr."""
    result = cli_runner.invoke(
        cli,
        [
            "--db-path",
            temp_db.database_path,
            "--log-level",
            "INFO",
            "proposal",
            "create",
            "--source",
            "Direct (B2C)",
            "--destination",
            "Istanbul",
        ],
    )
    assert result.exit_code == 0
    assert "[tourops.domain.proposal] INFO: Created proposal" in result.output
