from parse_mcp.server import main

main()
