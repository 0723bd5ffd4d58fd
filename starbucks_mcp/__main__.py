from starbucks_mcp.server import main

main()
