from conni_cli.mcp_server import main

main()
