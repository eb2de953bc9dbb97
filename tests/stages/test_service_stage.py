from nidsdeploy.stages.service import ServiceRegistrar


def test_service_unit_is_oneshot_bound_to_proxy(make_context):
    unit = ServiceRegistrar(make_context()).render_unit()

    assert "Type=oneshot" in unit
    assert "RemainAfterExit=true" in unit
    assert "Requires=nginx.service" in unit
    assert "WantedBy=multi-user.target" in unit


def test_service_stage_writes_unit_and_starts_it(runner, make_context, make_config, layout):
    result = ServiceRegistrar(make_context()).run(make_config())

    assert result.status == "ok"
    with open(layout.systemd_unit_file, encoding="utf-8") as file_obj:
        assert "[Service]" in file_obj.read()
    systemctl = [call[1:] for call in runner.commands("systemctl")]
    assert systemctl == [["daemon-reload"], ["enable", "nids.service"], ["start", "nids.service"]]
