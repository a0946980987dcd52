from codeforge_action.cli import main

main()
